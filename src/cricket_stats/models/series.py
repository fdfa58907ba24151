"""Series model for cricket stats database."""

from sqlalchemy import Column, String, Date
from sqlalchemy.orm import relationship

from .base import Base


class Series(Base):
    """A bilateral series, tournament or league season."""
    
    __tablename__ = "series"
    
    name = Column(String(200), nullable=False, index=True)
    series_type = Column(String(50), nullable=True)  # bilateral, tri-series, tournament, league
    host_country = Column(String(50), nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    
    matches = relationship("Match", back_populates="series")
    
    def __repr__(self) -> str:
        return f"<Series(name='{self.name}')>"
