"""Tests for JSON import."""

import json

import pytest
from sqlalchemy import func, select

from cricket_stats import repository
from cricket_stats.database import get_session
from cricket_stats.exceptions import CricketStatsError
from cricket_stats.ingest import import_file, load_records
from cricket_stats.models import Match, Player
from cricket_stats.schemas import PlayerCreate

from factories import bat, bowl, raw_record


def _document(include_invalid=True):
    records = [
        raw_record(1, {"batting": bat(50, 40, "caught"), "bowling": bowl(4, 30, 2)},
                   date="2024-01-10", result="won"),
        raw_record(2, {"batting": bat(100, 80, "not_out"), "bowling": bowl(5, 45, 0)},
                   date="2024-02-10", result="lost"),
    ]
    if include_invalid:
        records.append(raw_record(3, {"bowling": bowl(4.7, 20, 1)}, date="2024-03-01"))
    for record in records:
        record["match"].pop("id")
        record["performance"].pop("id")
        record["performance"].pop("player_id")
    return {"player": {"name": "K. Keeper", "role": "wicketkeeper"}, "matches": records}


@pytest.fixture
def import_path(tmp_path):
    path = tmp_path / "career.json"
    path.write_text(json.dumps(_document()), encoding="utf-8")
    return path


class TestLoadRecords:

    def test_collects_errors_by_index(self, import_path):
        loaded = load_records(import_path)
        assert loaded.player.name == "K. Keeper"
        assert [e.index for e in loaded.entries] == [0, 1]
        assert len(loaded.errors) == 1
        index, message = loaded.errors[0]
        assert index == 2
        assert "overs" in message

    def test_shape_errors_collected(self, tmp_path):
        document = {"matches": [raw_record(1, {"batting": bat(10, 10)}, format="Test")]}
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(document), encoding="utf-8")
        loaded = load_records(path)
        assert loaded.entries == []
        assert loaded.errors[0][0] == 0

    def test_not_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CricketStatsError):
            load_records(path)


class TestImportFile:

    def test_import_and_skip_duplicates(self, db, import_path):
        assert import_file(import_path) == {"inserted": 2, "skipped": 0, "errors": 1}
        assert import_file(import_path) == {"inserted": 0, "skipped": 2, "errors": 1}

        with get_session() as session:
            player = repository.get_active_player(session)
            assert player.name == "K. Keeper"
            pairs = repository.load_pairs(session, player.id)
        assert [p.performance.match_runs for p in pairs] == [50, 100]

    def test_dry_run_writes_nothing(self, db, import_path):
        assert import_file(import_path, dry_run=True) == {"inserted": 2, "skipped": 0, "errors": 1}
        with get_session() as session:
            assert session.execute(select(func.count()).select_from(Match)).scalar_one() == 0
            assert session.execute(select(func.count()).select_from(Player)).scalar_one() == 0

    def test_uses_active_player_without_player_block(self, db, tmp_path):
        with get_session() as session:
            player_id = repository.create_player(session, PlayerCreate(name="A. Rounder")).id

        document = _document(include_invalid=False)
        document.pop("player")
        path = tmp_path / "no_player.json"
        path.write_text(json.dumps(document), encoding="utf-8")

        assert import_file(path)["inserted"] == 2
        with get_session() as session:
            assert len(repository.load_pairs(session, player_id)) == 2

    def test_dry_run_counts_repeated_entries_like_a_real_run(self, db, tmp_path):
        document = _document(include_invalid=False)
        document["matches"].append(json.loads(json.dumps(document["matches"][0])))
        path = tmp_path / "repeated.json"
        path.write_text(json.dumps(document), encoding="utf-8")

        dry = import_file(path, dry_run=True)
        assert dry == {"inserted": 2, "skipped": 1, "errors": 0}
        assert import_file(path) == dry
