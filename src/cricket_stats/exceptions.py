"""Exceptions raised by the cricket stats tracker."""

from typing import Optional


class CricketStatsError(Exception):
    """Base exception for cricket stats errors."""
    pass


class RecordError(CricketStatsError):
    """A match/performance record could not be validated or aggregated."""

    def __init__(
        self,
        message: str,
        match_id: Optional[int] = None,
        performance_id: Optional[int] = None,
        cause: Optional[Exception] = None,
    ):
        self.match_id = match_id
        self.performance_id = performance_id
        self.cause = cause
        super().__init__(f"{message} (match_id={match_id}, performance_id={performance_id})")


class PlayerNotFoundError(CricketStatsError):
    """No player matched the request."""
    pass


class SnapshotNotFoundError(CricketStatsError):
    """No stored analytics snapshot for the requested player/category."""
    pass
