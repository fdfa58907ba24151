"""Match model for cricket stats database."""

from enum import Enum
from typing import Optional

from sqlalchemy import Column, String, Integer, Date, ForeignKey, Text, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship

from .base import Base


class MatchFormat(str, Enum):
    """Enumeration of cricket match formats."""
    TEST = "Test"
    ODI = "ODI"
    T20 = "T20"
    FIRST_CLASS = "First-class"
    LIST_A = "List-A"
    T20_DOMESTIC = "T20-domestic"

    @property
    def is_multi_innings(self) -> bool:
        """Two innings per side (Test and First-class)."""
        return self in (MatchFormat.TEST, MatchFormat.FIRST_CLASS)


class MatchLevel(str, Enum):
    """Enumeration of competition levels."""
    INTERNATIONAL = "international"
    IPL = "ipl"
    DOMESTIC = "domestic"
    RANJI = "ranji"
    UNDER19 = "under19"
    LIST_A = "list-a"
    CLUB = "club"


class MatchResult(str, Enum):
    """Result of a match from the player's side."""
    WON = "won"
    LOST = "lost"
    DRAW = "draw"
    TIE = "tie"
    NO_RESULT = "no_result"


class VenueType(str, Enum):
    """Venue relationship to the player's team."""
    HOME = "home"
    AWAY = "away"
    NEUTRAL = "neutral"


class PitchType(str, Enum):
    GREEN = "green"
    DUSTY = "dusty"
    HARD = "hard"
    FLAT = "flat"
    DRY = "dry"
    DAMP = "damp"


class WeatherCondition(str, Enum):
    SUNNY = "sunny"
    OVERCAST = "overcast"
    RAINY = "rainy"
    HUMID = "humid"
    WINDY = "windy"


class TossDecision(str, Enum):
    BAT = "bat"
    BOWL = "bowl"


class Match(Base):
    """Match model representing one fixture the player took part in."""
    
    __tablename__ = "matches"
    
    # Core match information
    format = Column(SQLEnum(MatchFormat), nullable=False, index=True)
    level = Column(SQLEnum(MatchLevel), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    series_id = Column(Integer, ForeignKey("series.id"), nullable=True, index=True)
    
    # Venue information
    venue = Column(String(200), nullable=False)
    city = Column(String(100), nullable=False)
    country = Column(String(50), nullable=True)
    home_away = Column(SQLEnum(VenueType), nullable=True)
    
    # Teams
    opponent = Column(String(100), nullable=False, index=True)
    team_represented = Column(String(100), nullable=True)
    
    # Match result
    result = Column(SQLEnum(MatchResult), nullable=True, index=True)
    result_margin = Column(String(50), nullable=True)  # "5 wickets", "45 runs", etc.
    toss_winner = Column(String(100), nullable=True)
    toss_decision = Column(SQLEnum(TossDecision), nullable=True)
    
    # Conditions
    pitch_type = Column(SQLEnum(PitchType), nullable=True)
    weather = Column(SQLEnum(WeatherCondition), nullable=True)
    
    notes = Column(Text, nullable=True)
    
    # Relationships
    series = relationship("Series", back_populates="matches")
    performance = relationship(
        "Performance",
        back_populates="match",
        uselist=False,
        cascade="all, delete-orphan",
    )
    
    # Indexes for common queries
    __table_args__ = (
        Index("idx_match_venue", "venue", "city", "country"),
        Index("idx_match_date_format", "date", "format"),
    )
    
    @property
    def is_multi_innings(self) -> bool:
        return MatchFormat(self.format).is_multi_innings

    @property
    def series_name(self) -> Optional[str]:
        return self.series.name if self.series else None
    
    def __repr__(self) -> str:
        return f"<Match({self.format.value if self.format else '?'} vs {self.opponent}, {self.date})>"
