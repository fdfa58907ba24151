"""Recalculation service: recompute analytics and store them as snapshots."""

import time
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from loguru import logger
from sqlalchemy import select

from ..config import Settings, get_settings
from ..database import get_session
from ..exceptions import SnapshotNotFoundError
from ..models import AnalyticsSnapshot
from .. import repository
from .engine import CATEGORIES, AnalyticsEngine


class AnalyticsService:
    """Persistence-backed wrapper around ``AnalyticsEngine``."""

    def __init__(self, settings: Optional[Settings] = None, session_factory=get_session):
        self.settings = settings or get_settings()
        self.session_factory = session_factory

    def recalculate(self, player_id: int, categories: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """Recompute the requested categories and replace their snapshots.

        Everything is computed in memory before any snapshot is touched, and
        all snapshots are written in one transaction, so a failure leaves the
        previous snapshots in place.
        """
        wanted = list(categories) if categories else list(CATEGORIES)
        logger.info(f"Recalculating {', '.join(wanted)} analytics for player {player_id}")
        start = time.perf_counter()

        with self.session_factory() as session:
            repository.get_player(session, player_id)
            pairs = repository.load_pairs(session, player_id)

            engine = AnalyticsEngine(player_id, self.settings)
            results = engine.compute(pairs, wanted)
            payloads = {name: model.model_dump(mode="json") for name, model in results.items()}

            computed_at = datetime.now(timezone.utc)
            for category, payload in payloads.items():
                snapshot = session.execute(
                    select(AnalyticsSnapshot).where(
                        AnalyticsSnapshot.player_id == player_id,
                        AnalyticsSnapshot.category == category,
                    )
                ).scalar_one_or_none()
                if snapshot is None:
                    snapshot = AnalyticsSnapshot(player_id=player_id, category=category)
                    session.add(snapshot)
                snapshot.payload = payload
                snapshot.computed_at = computed_at
                snapshot.matches_counted = len(pairs)

        elapsed = time.perf_counter() - start
        logger.info(f"Recalculated analytics for player {player_id} over {len(pairs)} matches in {elapsed:.3f}s")
        return payloads

    def get_snapshot(self, player_id: int, category: str) -> Dict[str, Any]:
        """Stored payload of one category."""
        with self.session_factory() as session:
            snapshot = session.execute(
                select(AnalyticsSnapshot).where(
                    AnalyticsSnapshot.player_id == player_id,
                    AnalyticsSnapshot.category == category,
                )
            ).scalar_one_or_none()
            if snapshot is None:
                raise SnapshotNotFoundError(
                    f"No {category} analytics stored for player {player_id}; run recalculate first"
                )
            return snapshot.payload
