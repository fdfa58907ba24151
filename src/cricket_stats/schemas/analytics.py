"""Pydantic schemas for aggregated analytics output."""

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.matches import MatchFormat, MatchLevel, VenueType


class HighestScore(BaseModel):
    """Best single batting innings; "110*" and "110" are different facts."""

    runs: int = Field(..., ge=0)
    is_not_out: bool = False

    def __str__(self) -> str:
        return f"{self.runs}{'*' if self.is_not_out else ''}"


class BowlingFigures(BaseModel):
    """Wickets/runs conceded, e.g. 5/23."""

    wickets: int = Field(..., ge=0)
    runs: int = Field(..., ge=0)

    def beats(self, other: Optional["BowlingFigures"]) -> bool:
        """More wickets always wins; on equal wickets fewer runs wins."""
        if other is None:
            return True
        if self.wickets != other.wickets:
            return self.wickets > other.wickets
        return self.runs < other.runs

    def __str__(self) -> str:
        return f"{self.wickets}/{self.runs}"


class PartitionStats(BaseModel):
    """Batting, bowling, fielding and result rollup over a set of matches."""

    matches: int = 0

    # Batting
    innings: int = 0
    runs: int = 0
    balls_faced: int = 0
    not_outs: int = 0
    dismissals: int = 0
    batting_average: Optional[float] = None
    strike_rate: float = 0.0
    highest_score: Optional[HighestScore] = None
    thirties: int = 0
    fifties: int = 0
    centuries: int = 0
    ducks: int = 0
    fours: int = 0
    sixes: int = 0

    # Bowling
    bowling_innings: int = 0
    overs: float = 0.0
    balls_bowled: int = 0
    maidens: int = 0
    runs_conceded: int = 0
    wickets: int = 0
    bowling_average: Optional[float] = None
    economy: float = 0.0
    bowling_strike_rate: Optional[float] = None
    best_bowling: Optional[BowlingFigures] = None
    three_wicket_hauls: int = 0
    four_wicket_hauls: int = 0
    five_wicket_hauls: int = 0
    ten_wicket_matches: int = 0

    # Fielding
    catches: int = 0
    run_outs: int = 0
    stumpings: int = 0
    fielding_dismissals: int = 0

    # Results
    matches_won: int = 0
    matches_lost: int = 0
    matches_drawn: int = 0
    matches_tied: int = 0
    no_results: int = 0
    win_percentage: float = 0.0


class FormatStats(PartitionStats):
    format: MatchFormat


class YearlyStats(PartitionStats):
    year: int


class OpponentStats(PartitionStats):
    opponent: str


class VenueStats(PartitionStats):
    venue: str
    city: str
    country: str = ""


class BattingPositionStats(PartitionStats):
    position: int


class SeriesStats(PartitionStats):
    series_name: str
    series_id: Optional[int] = None


class HomeAwayStats(BaseModel):
    home: PartitionStats = Field(default_factory=PartitionStats)
    away: PartitionStats = Field(default_factory=PartitionStats)
    neutral: PartitionStats = Field(default_factory=PartitionStats)
    unspecified: PartitionStats = Field(default_factory=PartitionStats)


class CareerSpan(BaseModel):
    start_year: Optional[int] = None
    end_year: Optional[int] = None
    years: int = 0


class CareerSummary(PartitionStats):
    """Career-wide rollup."""

    career_span: CareerSpan = Field(default_factory=CareerSpan)
    captained: int = 0
    keeping_matches: int = 0


class DismissalTypeHistogram(BaseModel):
    """Batting innings counted by how they ended."""

    caught: int = 0
    bowled: int = 0
    lbw: int = 0
    run_out: int = 0
    stumped: int = 0
    hit_wicket: int = 0
    not_out: int = 0
    retired_hurt: int = 0
    unrecorded: int = 0

    @property
    def total(self) -> int:
        return sum(self.model_dump().values())


class ConversionRates(BaseModel):
    """How often an innings that reached one threshold went on to the next."""

    start_threshold: int = 10
    starts: int = 0
    thirties: int = 0
    fifties: int = 0
    hundreds: int = 0
    start_to_thirty: float = 0.0
    thirty_to_fifty: float = 0.0
    fifty_to_hundred: float = 0.0


class TrendPoint(BaseModel):
    """Per-match point with running career figures up to that match."""

    match_id: Optional[int] = None
    date: dt.date
    opponent: str
    format: MatchFormat
    runs: int = 0
    wickets: int = 0
    cumulative_runs: int = 0
    cumulative_wickets: int = 0
    running_average: Optional[float] = None
    running_strike_rate: float = 0.0
    running_economy: float = 0.0


class FormatBowlingBest(BaseModel):
    format: MatchFormat
    best_innings: Optional[BowlingFigures] = None
    best_match: Optional[BowlingFigures] = None


class BowlingAnalytics(BaseModel):
    innings: int = 0
    overs: float = 0.0
    balls_bowled: int = 0
    maidens: int = 0
    wides: int = 0
    no_balls: int = 0
    runs_conceded: int = 0
    wickets: int = 0
    bowling_average: Optional[float] = None
    economy: float = 0.0
    bowling_strike_rate: Optional[float] = None
    three_wicket_hauls: int = 0
    four_wicket_hauls: int = 0
    five_wicket_hauls: int = 0
    ten_wicket_matches: int = 0
    best_innings: Optional[BowlingFigures] = None
    best_match: Optional[BowlingFigures] = None
    by_format: List[FormatBowlingBest] = Field(default_factory=list)


class FieldingLine(BaseModel):
    format: MatchFormat
    matches: int = 0
    catches: int = 0
    run_outs: int = 0
    stumpings: int = 0
    total_dismissals: int = 0


class FieldingAnalytics(BaseModel):
    matches: int = 0
    catches: int = 0
    run_outs: int = 0
    stumpings: int = 0
    total_dismissals: int = 0
    dismissals_per_match: float = 0.0
    captained: int = 0
    keeping_matches: int = 0
    by_format: List[FieldingLine] = Field(default_factory=list)


class CareerAnalytics(BaseModel):
    summary: CareerSummary = Field(default_factory=CareerSummary)
    formats: List[FormatStats] = Field(default_factory=list)
    years: List[YearlyStats] = Field(default_factory=list)
    trend: List[TrendPoint] = Field(default_factory=list)
    series: List[SeriesStats] = Field(default_factory=list)


class BattingAnalytics(BaseModel):
    opponents: List[OpponentStats] = Field(default_factory=list)
    venues: List[VenueStats] = Field(default_factory=list)
    home_away: HomeAwayStats = Field(default_factory=HomeAwayStats)
    dismissals: DismissalTypeHistogram = Field(default_factory=DismissalTypeHistogram)
    conversion: ConversionRates = Field(default_factory=ConversionRates)
    positions: List[BattingPositionStats] = Field(default_factory=list)


class AnalyticsReport(BaseModel):
    """Every category for one player."""

    player_id: int
    career: CareerAnalytics
    batting: BattingAnalytics
    bowling: BowlingAnalytics
    fielding: FieldingAnalytics


class AnalyticsFilters(BaseModel):
    """Match filters applied before aggregation."""

    format: Optional[MatchFormat] = None
    level: Optional[MatchLevel] = None
    opponent: Optional[str] = Field(None, description="Case-insensitive substring")
    series_id: Optional[int] = None
    venue: Optional[str] = Field(None, description="Case-insensitive substring")
    home_away: Optional[VenueType] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
