"""Player model for cricket stats database."""

from datetime import date
from enum import Enum
from typing import Optional

from sqlalchemy import Column, String, Date, Boolean, Index, Enum as SQLEnum, text
from sqlalchemy.orm import relationship

from .base import Base


class PlayerRole(str, Enum):
    """Enumeration of playing roles."""
    BATSMAN = "batsman"
    BOWLER = "bowler"
    ALL_ROUNDER = "all_rounder"
    WICKETKEEPER = "wicketkeeper"


class Player(Base):
    """Player whose career is being tracked."""
    
    __tablename__ = "players"
    
    # Core player information
    name = Column(String(100), nullable=False, index=True)
    date_of_birth = Column(Date, nullable=True)
    role = Column(SQLEnum(PlayerRole), nullable=True)
    batting_style = Column(String(50), nullable=True)  # Right Hand Bat, Left Hand Bat
    bowling_style = Column(String(50), nullable=True)  # Right Arm Fast Medium, etc.
    
    # Career info
    career_start = Column(Date, nullable=True)
    career_end = Column(Date, nullable=True)
    is_active = Column(Boolean, default=False, nullable=False)
    
    # Relationships
    performances = relationship("Performance", back_populates="player", cascade="all, delete-orphan")
    snapshots = relationship("AnalyticsSnapshot", back_populates="player", cascade="all, delete-orphan")
    
    # At most one active player
    __table_args__ = (
        Index(
            "uq_player_active",
            "is_active",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
    )
    
    @property
    def age(self) -> Optional[int]:
        """Calculate player's age."""
        if not self.date_of_birth:
            return None
        today = date.today()
        return today.year - self.date_of_birth.year - (
            (today.month, today.day) < (self.date_of_birth.month, self.date_of_birth.day)
        )
    
    def __repr__(self) -> str:
        return f"<Player(name='{self.name}', active={self.is_active})>"
