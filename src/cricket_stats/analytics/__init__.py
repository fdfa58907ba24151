"""Performance analytics: derived fields, rollups and the engine."""

from .calculator import derive_fields
from .engine import CATEGORIES, AnalyticsEngine
from .rollup import build_pairs, partition, summarize

__all__ = [
    "CATEGORIES",
    "AnalyticsEngine",
    "build_pairs",
    "derive_fields",
    "partition",
    "summarize",
]
