"""JSON import of a player's match history."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from loguru import logger
from pydantic import BaseModel, ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from . import repository
from .analytics.calculator import derive_fields
from .database import get_session
from .exceptions import CricketStatsError, PlayerNotFoundError
from .models import Match, Performance, Player
from .schemas import MatchCreate, MatchRecord, PerformanceCreate, PlayerCreate, RecordPair


class ImportEntry(BaseModel):
    """One validated match with the player's performance in it."""

    index: int
    match: MatchCreate
    performance: PerformanceCreate


class LoadedRecords(BaseModel):
    """Result of reading an import file."""

    player: Optional[PlayerCreate] = None
    entries: List[ImportEntry] = []
    errors: List[Tuple[int, str]] = []


def _format_error(e: Exception) -> str:
    if isinstance(e, ValidationError):
        return "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'record'}: {err['msg']}" for err in e.errors()
        )
    return str(e)


def load_records(path: Union[str, Path]) -> LoadedRecords:
    """Read and validate an import file.

    The file holds ``{"player": {...}, "matches": [{"match": {...},
    "performance": {...}}, ...]}``. Invalid entries are collected with their
    index instead of aborting the whole file.
    """
    path = Path(path)
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise CricketStatsError(f"{path} is not valid JSON: {e}") from e
    if not isinstance(document, dict):
        raise CricketStatsError(f"{path} must contain a JSON object")

    player = None
    if document.get("player") is not None:
        try:
            player = PlayerCreate.model_validate(document["player"])
        except ValidationError as e:
            raise CricketStatsError(f"Invalid player in {path}: {_format_error(e)}") from e

    loaded = LoadedRecords(player=player)
    for index, item in enumerate(document.get("matches") or []):
        try:
            if not isinstance(item, dict):
                raise ValueError("entry must be an object with 'match' and 'performance'")
            match = MatchCreate.model_validate(item.get("match") or {})
            performance = PerformanceCreate.model_validate(item.get("performance") or {})
            RecordPair(
                match=MatchRecord.model_validate(match.model_dump()),
                performance=derive_fields(performance),
            )
        except (ValidationError, ValueError) as e:
            loaded.errors.append((index, _format_error(e)))
            logger.warning(f"Entry {index} in {path.name} rejected: {_format_error(e)}")
            continue
        loaded.entries.append(ImportEntry(index=index, match=match, performance=performance))

    logger.info(f"Read {len(loaded.entries)} valid and {len(loaded.errors)} invalid entries from {path}")
    return loaded


def _resolve_player(session: Session, player: Optional[PlayerCreate], dry_run: bool) -> Optional[Player]:
    if player is None:
        return repository.get_active_player(session)

    existing = session.execute(select(Player).where(Player.name == player.name)).scalars().first()
    if existing is not None:
        return existing
    if dry_run:
        return None
    return repository.create_player(session, player)


def _match_key(match: MatchCreate) -> Tuple:
    return (match.date, match.format, match.opponent, match.venue)


def _already_recorded(session: Session, player_id: int, match: MatchCreate) -> bool:
    found = session.execute(
        select(Match.id)
        .join(Performance, Performance.match_id == Match.id)
        .where(
            Performance.player_id == player_id,
            Match.date == match.date,
            Match.format == match.format,
            Match.opponent == match.opponent,
            Match.venue == match.venue,
        )
    ).first()
    return found is not None


def import_file(path: Union[str, Path], dry_run: bool = False) -> Dict[str, Any]:
    """Import a file through the repository.

    Matches already recorded for the player (same date, format, opponent
    and venue) are skipped. With ``dry_run`` nothing is written.
    """
    loaded = load_records(path)
    stats = {"inserted": 0, "skipped": 0, "errors": len(loaded.errors)}

    with get_session() as session:
        player = _resolve_player(session, loaded.player, dry_run)
        if player is None and not dry_run:
            raise PlayerNotFoundError("Import needs a player")

        pending = set()

        for entry in loaded.entries:
            if player is not None and _already_recorded(session, player.id, entry.match):
                stats["skipped"] += 1
                continue
            if dry_run:
                # Repeats within the file would be skipped once the first copy is saved
                key = _match_key(entry.match)
                if key in pending:
                    stats["skipped"] += 1
                else:
                    pending.add(key)
                    stats["inserted"] += 1
                continue

            match = repository.save_match(session, entry.match)
            performance = entry.performance.model_copy(update={"match_id": match.id, "player_id": player.id})
            try:
                repository.save_performance(session, performance)
            except CricketStatsError as e:
                logger.error(f"Failed to import entry {entry.index}: {e}")
                session.delete(match)
                stats["errors"] += 1
                continue
            stats["inserted"] += 1

        if dry_run:
            session.rollback()

    logger.info(f"Import of {Path(path).name}{' (dry run)' if dry_run else ''}: {stats}")
    return stats
