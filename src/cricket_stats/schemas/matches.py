"""Pydantic schemas for match data validation."""

import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.matches import (
    MatchFormat,
    MatchLevel,
    MatchResult,
    VenueType,
    PitchType,
    WeatherCondition,
    TossDecision,
)


class MatchBase(BaseModel):
    """Base match schema with common fields."""
    
    format: MatchFormat = Field(..., description="Match format")
    level: MatchLevel = Field(..., description="Competition level")
    date: dt.date = Field(..., description="Match date")
    venue: str = Field(..., min_length=1, max_length=200, description="Venue name")
    city: str = Field(..., min_length=1, max_length=100, description="Venue city")
    country: Optional[str] = Field(None, max_length=50, description="Venue country")
    opponent: str = Field(..., min_length=1, max_length=100, description="Opposition team")
    team_represented: Optional[str] = Field(None, max_length=100, description="Team the player played for")
    home_away: Optional[VenueType] = Field(None, description="Home, away or neutral venue")
    result: Optional[MatchResult] = Field(None, description="Result from the player's side")
    result_margin: Optional[str] = Field(None, max_length=50, description="Result margin")
    series_id: Optional[int] = Field(None, description="Series ID")
    series_name: Optional[str] = Field(None, max_length=200, description="Series name")
    pitch_type: Optional[PitchType] = Field(None, description="Pitch type")
    weather: Optional[WeatherCondition] = Field(None, description="Weather conditions")
    toss_winner: Optional[str] = Field(None, max_length=100, description="Toss winner")
    toss_decision: Optional[TossDecision] = Field(None, description="Toss decision")
    notes: Optional[str] = Field(None, max_length=2000, description="Additional notes")
    
    @property
    def is_multi_innings(self) -> bool:
        return self.format.is_multi_innings
    
    @property
    def venue_key(self) -> tuple[str, str, str]:
        return (self.venue, self.city, self.country or "")


class MatchCreate(MatchBase):
    """Schema for creating a new match."""
    pass


class MatchRecord(MatchBase):
    """A stored match as consumed by the aggregation engine."""
    
    model_config = ConfigDict(from_attributes=True)
    
    id: Optional[int] = Field(None, description="Match ID")
