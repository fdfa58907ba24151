"""Pydantic schemas for player data validation."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from ..models.players import PlayerRole


class PlayerBase(BaseModel):
    """Base player schema with common fields."""
    
    name: str = Field(..., min_length=1, max_length=100, description="Player name")
    date_of_birth: Optional[date] = Field(None, description="Date of birth")
    role: Optional[PlayerRole] = Field(None, description="Playing role")
    batting_style: Optional[str] = Field(None, max_length=50, description="Batting style")
    bowling_style: Optional[str] = Field(None, max_length=50, description="Bowling style")
    career_start: Optional[date] = Field(None, description="First match date")
    career_end: Optional[date] = Field(None, description="Last match date")
    is_active: bool = Field(True, description="Whether this is the tracked player")
    
    @field_validator('career_end')
    @classmethod
    def validate_career_end(cls, v, info: ValidationInfo):
        """Validate career end is after career start."""
        start = info.data.get('career_start')
        if v and start and v < start:
            raise ValueError('Career end must be after career start')
        return v


class PlayerCreate(PlayerBase):
    """Schema for creating a new player."""
    pass


class PlayerResponse(PlayerBase):
    """Schema for player response data."""
    
    model_config = ConfigDict(from_attributes=True)
    
    id: int = Field(..., description="Player ID")
    age: Optional[int] = Field(None, description="Player age")
