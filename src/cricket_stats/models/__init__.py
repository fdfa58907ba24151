"""Database models for the cricket stats tracker."""

from .base import Base
from .players import Player, PlayerRole
from .series import Series
from .matches import (
    Match,
    MatchFormat,
    MatchLevel,
    MatchResult,
    VenueType,
    PitchType,
    WeatherCondition,
    TossDecision,
)
from .performances import Performance, DismissalType
from .analytics import AnalyticsSnapshot

__all__ = [
    "Base",
    "Player",
    "PlayerRole",
    "Series",
    "Match",
    "MatchFormat",
    "MatchLevel",
    "MatchResult",
    "VenueType",
    "PitchType",
    "WeatherCondition",
    "TossDecision",
    "Performance",
    "DismissalType",
    "AnalyticsSnapshot",
]
