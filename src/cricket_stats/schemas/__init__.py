"""Pydantic schemas for data validation."""

from .players import PlayerCreate, PlayerResponse
from .matches import MatchCreate, MatchRecord
from .performances import (
    InningsBatting,
    InningsBowling,
    Fielding,
    PerformanceCreate,
    PerformanceRecord,
    RecordPair,
)
from .analytics import (
    AnalyticsFilters,
    AnalyticsReport,
    BattingAnalytics,
    BattingPositionStats,
    BowlingAnalytics,
    BowlingFigures,
    CareerAnalytics,
    CareerSummary,
    ConversionRates,
    DismissalTypeHistogram,
    FieldingAnalytics,
    FormatStats,
    HighestScore,
    HomeAwayStats,
    OpponentStats,
    PartitionStats,
    SeriesStats,
    TrendPoint,
    VenueStats,
    YearlyStats,
)

__all__ = [
    "PlayerCreate",
    "PlayerResponse",
    "MatchCreate",
    "MatchRecord",
    "InningsBatting",
    "InningsBowling",
    "Fielding",
    "PerformanceCreate",
    "PerformanceRecord",
    "RecordPair",
    "AnalyticsFilters",
    "AnalyticsReport",
    "BattingAnalytics",
    "BattingPositionStats",
    "BowlingAnalytics",
    "BowlingFigures",
    "CareerAnalytics",
    "CareerSummary",
    "ConversionRates",
    "DismissalTypeHistogram",
    "FieldingAnalytics",
    "FormatStats",
    "HighestScore",
    "HomeAwayStats",
    "OpponentStats",
    "PartitionStats",
    "SeriesStats",
    "TrendPoint",
    "VenueStats",
    "YearlyStats",
]
