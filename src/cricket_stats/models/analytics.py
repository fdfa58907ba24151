"""Stored analytics snapshots."""

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base


class AnalyticsSnapshot(Base):
    """Last computed payload of one analytics category for a player."""
    
    __tablename__ = "analytics_snapshots"
    
    player_id = Column(Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False, index=True)
    category = Column(String(20), nullable=False)  # career, batting, bowling, fielding
    payload = Column(JSON, nullable=False)
    computed_at = Column(DateTime(timezone=True), nullable=False)
    matches_counted = Column(Integer, default=0, nullable=False)
    
    player = relationship("Player", back_populates="snapshots")
    
    __table_args__ = (
        UniqueConstraint("player_id", "category", name="uq_snapshot_player_category"),
    )
    
    def __repr__(self) -> str:
        return f"<AnalyticsSnapshot(player_id={self.player_id}, category='{self.category}', computed_at={self.computed_at})>"
