"""Pydantic schemas for performance data validation."""

from typing import Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..utils.overs import overs_to_balls
from ..models.performances import DismissalType
from .matches import MatchRecord


class InningsBatting(BaseModel):
    """One batting innings: raw inputs plus derived fields."""

    did_not_bat: bool = Field(False, description="Explicit non-participation")
    runs: int = Field(0, ge=0, description="Runs scored")
    balls_faced: int = Field(0, ge=0, description="Balls faced")
    fours: int = Field(0, ge=0, description="Fours hit")
    sixes: int = Field(0, ge=0, description="Sixes hit")
    dismissal_type: Optional[DismissalType] = Field(None, description="How the innings ended")
    dismissal_bowler: Optional[str] = Field(None, max_length=100, description="Bowler credited")
    dismissal_fielder: Optional[str] = Field(None, max_length=100, description="Fielder involved")
    batting_position: Optional[int] = Field(None, ge=1, le=11, description="Batting position")

    # Derived
    strike_rate: float = Field(0.0, ge=0.0, description="Runs per 100 balls")
    boundary_runs: int = Field(0, ge=0, description="Runs from fours and sixes")
    boundary_percentage: float = Field(0.0, ge=0.0, description="Share of runs from boundaries")
    is_not_out: bool = False
    is_duck: bool = False
    is_fifty: bool = False
    is_century: bool = False


class InningsBowling(BaseModel):
    """One bowling innings: raw inputs plus derived fields."""

    did_not_bowl: bool = Field(False, description="Explicit non-participation")
    overs: float = Field(0.0, ge=0.0, description="Overs in packed notation (4.3 = 4 overs 3 balls)")
    maidens: int = Field(0, ge=0, description="Maidens bowled")
    runs_conceded: int = Field(0, ge=0, description="Runs conceded")
    wickets: int = Field(0, ge=0, le=10, description="Wickets taken")
    wides: int = Field(0, ge=0, description="Wides bowled")
    no_balls: int = Field(0, ge=0, description="No-balls bowled")

    # Derived
    balls_bowled: int = Field(0, ge=0, description="Legal deliveries bowled")
    economy: float = Field(0.0, ge=0.0, description="Runs per over")
    bowling_strike_rate: Optional[float] = Field(None, description="Balls per wicket")
    bowling_average: Optional[float] = Field(None, description="Runs per wicket")
    is_three_wicket_haul: bool = False
    is_four_wicket_haul: bool = False
    is_five_wicket_haul: bool = False

    @field_validator('overs')
    @classmethod
    def validate_overs(cls, v):
        """Validate packed overs notation (balls digit 0-5)."""
        overs_to_balls(v)
        return v


class Fielding(BaseModel):
    """Fielding contributions in one match."""

    catches: int = Field(0, ge=0, description="Catches taken")
    run_outs: int = Field(0, ge=0, description="Run outs effected")
    stumpings: int = Field(0, ge=0, description="Stumpings made")
    total_dismissals: int = Field(0, ge=0, description="Catches + run outs + stumpings")


BATTING_SLOTS = ("batting", "first_innings_batting", "second_innings_batting")
BOWLING_SLOTS = ("bowling", "first_innings_bowling", "second_innings_bowling")
SINGLE_INNINGS_SLOTS = ("batting", "bowling")
MULTI_INNINGS_SLOTS = (
    "first_innings_batting",
    "second_innings_batting",
    "first_innings_bowling",
    "second_innings_bowling",
)


class PerformanceBase(BaseModel):
    """Base performance schema with common fields."""

    # Single innings (ODI/T20/List-A/T20-domestic)
    batting: Optional[InningsBatting] = None
    bowling: Optional[InningsBowling] = None

    # Multi innings (Test/First-class)
    first_innings_batting: Optional[InningsBatting] = None
    second_innings_batting: Optional[InningsBatting] = None
    first_innings_bowling: Optional[InningsBowling] = None
    second_innings_bowling: Optional[InningsBowling] = None

    fielding: Fielding = Field(default_factory=Fielding)
    is_captain: bool = Field(False, description="Captained the side")
    is_wicketkeeper: bool = Field(False, description="Kept wicket")

    def batting_innings(self) -> Iterator[InningsBatting]:
        """Present batting sub-records, did-not-bat included."""
        for slot in BATTING_SLOTS:
            innings = getattr(self, slot)
            if innings is not None:
                yield innings

    def bowling_innings(self) -> Iterator[InningsBowling]:
        """Present bowling sub-records, did-not-bowl included."""
        for slot in BOWLING_SLOTS:
            innings = getattr(self, slot)
            if innings is not None:
                yield innings


class PerformanceCreate(PerformanceBase):
    """Schema for creating a performance."""

    match_id: Optional[int] = Field(None, description="Match ID")
    player_id: Optional[int] = Field(None, description="Player ID")


class PerformanceRecord(PerformanceCreate):
    """A performance with derived fields, as stored and aggregated."""

    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = Field(None, description="Performance ID")
    match_runs: int = Field(0, ge=0)
    match_balls_faced: int = Field(0, ge=0)
    match_wickets: int = Field(0, ge=0)
    match_overs: float = Field(0.0, ge=0.0)
    match_balls_bowled: int = Field(0, ge=0)
    match_runs_conceded: int = Field(0, ge=0)


class RecordPair(BaseModel):
    """One match and the player's performance in it."""

    match: MatchRecord
    performance: PerformanceRecord

    @model_validator(mode='after')
    def validate_innings_shape(self):
        """Validate the innings layout matches the match format."""
        if self.match.is_multi_innings:
            wrong = [s for s in SINGLE_INNINGS_SLOTS if getattr(self.performance, s) is not None]
        else:
            wrong = [s for s in MULTI_INNINGS_SLOTS if getattr(self.performance, s) is not None]
        if wrong:
            raise ValueError(
                f'{self.match.format.value} performance cannot carry {", ".join(wrong)}'
            )
        return self
