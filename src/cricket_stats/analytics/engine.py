"""Analytics engine: assembles the per-category payloads for one player."""

from typing import Callable, Dict, Iterable, List, Optional

from loguru import logger
from pydantic import BaseModel

from ..config import Settings, get_settings
from ..exceptions import RecordError
from ..schemas.analytics import (
    AnalyticsFilters,
    AnalyticsReport,
    BattingAnalytics,
    BowlingAnalytics,
    CareerAnalytics,
    FieldingAnalytics,
)
from ..schemas.performances import RecordPair
from . import rollup

CATEGORIES = ("career", "batting", "bowling", "fielding")


class AnalyticsEngine:
    """Pure aggregation over a player's (match, performance) pairs.

    Each category can be computed on its own; running any of them twice on
    the same pairs gives identical output.
    """

    def __init__(self, player_id: int, settings: Optional[Settings] = None):
        self.player_id = player_id
        self.settings = settings or get_settings()

    @property
    def overs_arithmetic(self) -> str:
        return self.settings.analytics.overs_arithmetic

    def _prepare(self, pairs: Iterable[RecordPair], filters: Optional[AnalyticsFilters]) -> List[RecordPair]:
        pairs = rollup.sort_pairs(pairs)
        for pair in pairs:
            if pair.performance.player_id not in (None, self.player_id):
                raise RecordError(
                    f"Record belongs to player {pair.performance.player_id}, not {self.player_id}",
                    pair.match.id,
                    pair.performance.id,
                )
        return rollup.apply_filters(pairs, filters)

    def career(self, pairs: Iterable[RecordPair], filters: Optional[AnalyticsFilters] = None) -> CareerAnalytics:
        pairs = self._prepare(pairs, filters)
        mode = self.overs_arithmetic
        return CareerAnalytics(
            summary=rollup.career_summary(pairs, overs_arithmetic=mode),
            formats=rollup.format_breakdown(pairs, overs_arithmetic=mode),
            years=rollup.yearly_breakdown(pairs, overs_arithmetic=mode),
            trend=rollup.trend(pairs, overs_arithmetic=mode),
            series=rollup.series_breakdown(pairs, overs_arithmetic=mode),
        )

    def batting(self, pairs: Iterable[RecordPair], filters: Optional[AnalyticsFilters] = None) -> BattingAnalytics:
        pairs = self._prepare(pairs, filters)
        mode = self.overs_arithmetic
        return BattingAnalytics(
            opponents=rollup.opponent_breakdown(pairs, overs_arithmetic=mode),
            venues=rollup.venue_breakdown(pairs, overs_arithmetic=mode),
            home_away=rollup.home_away_breakdown(pairs, overs_arithmetic=mode),
            dismissals=rollup.dismissal_histogram(pairs),
            conversion=rollup.conversion_rates(
                pairs, start_runs=self.settings.analytics.conversion_start_runs
            ),
            positions=rollup.position_breakdown(pairs),
        )

    def bowling(self, pairs: Iterable[RecordPair], filters: Optional[AnalyticsFilters] = None) -> BowlingAnalytics:
        return rollup.bowling_analytics(self._prepare(pairs, filters), overs_arithmetic=self.overs_arithmetic)

    def fielding(self, pairs: Iterable[RecordPair], filters: Optional[AnalyticsFilters] = None) -> FieldingAnalytics:
        return rollup.fielding_analytics(self._prepare(pairs, filters))

    def compute(
        self,
        pairs: Iterable[RecordPair],
        categories: Optional[Iterable[str]] = None,
        filters: Optional[AnalyticsFilters] = None,
    ) -> Dict[str, BaseModel]:
        """Compute the requested categories (all by default), keyed by name."""
        pairs = list(pairs)
        wanted = list(categories) if categories else list(CATEGORIES)
        unknown = [c for c in wanted if c not in CATEGORIES]
        if unknown:
            raise ValueError(f"Unknown analytics categories: {', '.join(unknown)}")

        builders: Dict[str, Callable] = {
            "career": self.career,
            "batting": self.batting,
            "bowling": self.bowling,
            "fielding": self.fielding,
        }
        results = {}
        for category in CATEGORIES:
            if category in wanted:
                results[category] = builders[category](pairs, filters)
                logger.debug(f"Computed {category} analytics for player {self.player_id} over {len(pairs)} matches")
        return results

    def report(self, pairs: Iterable[RecordPair], filters: Optional[AnalyticsFilters] = None) -> AnalyticsReport:
        """Every category in one document."""
        results = self.compute(pairs, filters=filters)
        return AnalyticsReport(player_id=self.player_id, **results)
