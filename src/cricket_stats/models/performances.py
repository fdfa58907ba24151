"""Performance model for cricket stats database."""

from enum import Enum

from sqlalchemy import Column, Integer, Float, Boolean, ForeignKey, JSON
from sqlalchemy.orm import relationship

from .base import Base


class DismissalType(str, Enum):
    """Enumeration of batting dismissal types."""
    CAUGHT = "caught"
    BOWLED = "bowled"
    LBW = "lbw"
    RUN_OUT = "run_out"
    STUMPED = "stumped"
    HIT_WICKET = "hit_wicket"
    NOT_OUT = "not_out"
    RETIRED_HURT = "retired_hurt"


class Performance(Base):
    """The player's batting, bowling and fielding in one match.
    
    Innings sub-records are stored as JSON documents in the shape of the
    pydantic ``InningsBatting``/``InningsBowling`` schemas, derived fields
    included. Single-innings formats use ``batting``/``bowling``; Test and
    First-class use the first/second innings columns.
    """
    
    __tablename__ = "performances"
    
    # Core references
    player_id = Column(Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False, index=True)
    match_id = Column(Integer, ForeignKey("matches.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    
    # Single innings
    batting = Column(JSON, nullable=True)
    bowling = Column(JSON, nullable=True)
    
    # Multi innings
    first_innings_batting = Column(JSON, nullable=True)
    second_innings_batting = Column(JSON, nullable=True)
    first_innings_bowling = Column(JSON, nullable=True)
    second_innings_bowling = Column(JSON, nullable=True)
    
    fielding = Column(JSON, nullable=False)
    
    # Context
    is_captain = Column(Boolean, default=False, nullable=False)
    is_wicketkeeper = Column(Boolean, default=False, nullable=False)
    
    # Match-level aggregates
    match_runs = Column(Integer, default=0, nullable=False)
    match_balls_faced = Column(Integer, default=0, nullable=False)
    match_wickets = Column(Integer, default=0, nullable=False)
    match_overs = Column(Float, default=0.0, nullable=False)
    match_balls_bowled = Column(Integer, default=0, nullable=False)
    match_runs_conceded = Column(Integer, default=0, nullable=False)
    
    # Relationships
    player = relationship("Player", back_populates="performances")
    match = relationship("Match", back_populates="performance")
    
    def __repr__(self) -> str:
        return f"<Performance(match_id={self.match_id}, runs={self.match_runs}, wickets={self.match_wickets})>"
