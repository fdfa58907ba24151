"""Database access for players, matches, performances and snapshots.

Every function takes an open ``Session``; committing is left to the caller
(normally the ``get_session()`` context manager).
"""

from typing import List, Optional

from loguru import logger
from pydantic import ValidationError
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from .analytics.calculator import derive_fields
from .exceptions import PlayerNotFoundError, RecordError
from .models import Match, Performance, Player, Series
from .schemas import (
    MatchCreate,
    MatchRecord,
    PerformanceCreate,
    PerformanceRecord,
    PlayerCreate,
    RecordPair,
)
from .schemas.performances import BATTING_SLOTS, BOWLING_SLOTS


def create_player(session: Session, player_data: PlayerCreate) -> Player:
    """Insert a player; an active player replaces the current one."""
    if player_data.is_active:
        session.execute(update(Player).where(Player.is_active.is_(True)).values(is_active=False))
        session.flush()

    player = Player(**player_data.model_dump())
    session.add(player)
    session.flush()
    logger.info(f"Created player {player.name} (id={player.id}, active={player.is_active})")
    return player


def get_player(session: Session, player_id: int) -> Player:
    player = session.get(Player, player_id)
    if player is None:
        raise PlayerNotFoundError(f"No player with id {player_id}")
    return player


def list_players(session: Session) -> List[Player]:
    return list(session.execute(select(Player).order_by(Player.id)).scalars())


def get_active_player(session: Session) -> Player:
    """Return the single active player."""
    player = session.execute(
        select(Player).where(Player.is_active.is_(True))
    ).scalar_one_or_none()
    if player is None:
        raise PlayerNotFoundError("No active player; create one or activate an existing player")
    return player


def set_active_player(session: Session, player_id: int) -> Player:
    """Make ``player_id`` the active player, deactivating any other."""
    player = get_player(session, player_id)
    session.execute(
        update(Player).where(Player.is_active.is_(True), Player.id != player_id).values(is_active=False)
    )
    session.flush()
    player.is_active = True
    session.flush()
    return player


def get_or_create_series(session: Session, name: str) -> Series:
    series = session.execute(select(Series).where(Series.name == name)).scalar_one_or_none()
    if series is None:
        series = Series(name=name)
        session.add(series)
        session.flush()
    return series


def save_match(session: Session, match_data: MatchCreate) -> Match:
    """Insert a match; ``series_name`` resolves to a series row."""
    data = match_data.model_dump(exclude={"series_name"})
    if match_data.series_name and match_data.series_id is None:
        data["series_id"] = get_or_create_series(session, match_data.series_name).id

    match = Match(**data)
    session.add(match)
    session.flush()
    logger.debug(f"Saved match {match.id}: {match.format.value} vs {match.opponent} on {match.date}")
    return match


def _dump(sub_record) -> Optional[dict]:
    return sub_record.model_dump(mode="json") if sub_record is not None else None


def save_performance(
    session: Session,
    performance_data: PerformanceCreate,
    overs_arithmetic: Optional[str] = None,
) -> Performance:
    """Recompute derived fields and store the performance for its match.

    A performance already stored for the match is overwritten. The innings
    layout must fit the match format (single vs two innings).
    """
    match = session.get(Match, performance_data.match_id)
    if match is None:
        raise RecordError("Performance refers to an unknown match", match_id=performance_data.match_id)
    if performance_data.player_id is None:
        raise RecordError("Performance has no player", match_id=match.id)
    get_player(session, performance_data.player_id)

    try:
        record = derive_fields(performance_data, overs_arithmetic)
        RecordPair(match=MatchRecord.model_validate(match), performance=record)
    except (ValidationError, ValueError) as e:
        raise RecordError("Invalid performance", match_id=match.id, cause=e) from e

    performance = session.execute(
        select(Performance).where(Performance.match_id == match.id)
    ).scalar_one_or_none()
    if performance is None:
        performance = Performance(match_id=match.id)
        session.add(performance)

    performance.player_id = record.player_id
    for slot in BATTING_SLOTS + BOWLING_SLOTS:
        setattr(performance, slot, _dump(getattr(record, slot)))
    performance.fielding = record.fielding.model_dump(mode="json")
    performance.is_captain = record.is_captain
    performance.is_wicketkeeper = record.is_wicketkeeper
    performance.match_runs = record.match_runs
    performance.match_balls_faced = record.match_balls_faced
    performance.match_wickets = record.match_wickets
    performance.match_overs = record.match_overs
    performance.match_balls_bowled = record.match_balls_bowled
    performance.match_runs_conceded = record.match_runs_conceded

    session.flush()
    return performance


def delete_match(session: Session, match_id: int) -> bool:
    """Delete a match and its performance. Returns False if it did not exist."""
    match = session.get(Match, match_id)
    if match is None:
        return False
    session.delete(match)
    session.flush()
    logger.info(f"Deleted match {match_id}")
    return True


def load_pairs(session: Session, player_id: int) -> List[RecordPair]:
    """All (match, performance) pairs for a player, oldest match first."""
    rows = session.execute(
        select(Match, Performance)
        .join(Performance, Performance.match_id == Match.id)
        .where(Performance.player_id == player_id)
        .order_by(Match.date, Match.id)
    ).all()

    pairs = []
    for match, performance in rows:
        try:
            pairs.append(RecordPair(
                match=MatchRecord.model_validate(match),
                performance=PerformanceRecord.model_validate(performance),
            ))
        except ValidationError as e:
            raise RecordError("Stored record is invalid", match.id, performance.id, cause=e) from e

    logger.debug(f"Loaded {len(pairs)} records for player {player_id}")
    return pairs
