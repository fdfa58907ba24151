"""CLI smoke tests using typer's CliRunner."""

import json

import pytest
from typer.testing import CliRunner

from cricket_stats.cli.main import app

from factories import raw_record, scenario_records

runner = CliRunner()


@pytest.fixture
def career_file(tmp_path):
    records = scenario_records()
    for record in records:
        record["match"].pop("id")
        record["performance"].pop("id")
        record["performance"].pop("player_id")
    path = tmp_path / "career.json"
    path.write_text(json.dumps({"matches": records}), encoding="utf-8")
    return path


@pytest.fixture
def loaded(db, career_file):
    assert runner.invoke(app, ["add-player", "--name", "T. Tester"]).exit_code == 0
    result = runner.invoke(app, ["import", str(career_file)])
    assert result.exit_code == 0, result.output
    return career_file


class TestCommands:

    def test_setup_db(self, db):
        result = runner.invoke(app, ["setup-db"])
        assert result.exit_code == 0
        assert "initialized" in result.output

    def test_summary_without_player_fails(self, db):
        result = runner.invoke(app, ["summary"])
        assert result.exit_code == 1
        assert "No active player" in result.output

    def test_summary(self, loaded):
        result = runner.invoke(app, ["summary"])
        assert result.exit_code == 0, result.output
        assert "Career Summary" in result.output

    @pytest.mark.parametrize("kind", ["format", "year", "opponent", "venue", "series", "home-away", "position"])
    def test_breakdowns(self, loaded, kind):
        result = runner.invoke(app, ["breakdown", kind])
        assert result.exit_code == 0, result.output

    def test_breakdown_with_filters(self, loaded):
        result = runner.invoke(app, ["breakdown", "year", "--opponent", "aus", "--from", "2024-02-01"])
        assert result.exit_code == 0, result.output
        assert "2024" in result.output

    @pytest.mark.parametrize("command", ["dismissals", "conversion", "trend"])
    def test_views(self, loaded, command):
        result = runner.invoke(app, [command])
        assert result.exit_code == 0, result.output

    def test_recalculate_and_snapshot(self, loaded):
        result = runner.invoke(app, ["recalculate", "--category", "career"])
        assert result.exit_code == 0, result.output
        result = runner.invoke(app, ["snapshot", "career"])
        assert result.exit_code == 0, result.output
        assert '"matches": 2' in result.output

    def test_snapshot_missing(self, loaded):
        result = runner.invoke(app, ["snapshot", "bowling"])
        assert result.exit_code == 1

    def test_export(self, loaded, tmp_path):
        out = tmp_path / "report.json"
        result = runner.invoke(app, ["export", str(out)])
        assert result.exit_code == 0, result.output
        report = json.loads(out.read_text(encoding="utf-8"))
        assert report["career"]["summary"]["matches"] == 2
        assert report["career"]["summary"]["runs"] == 150
        assert report["career"]["summary"]["batting_average"] == 150.0

    def test_import_with_invalid_entries_exits_nonzero(self, db, tmp_path):
        runner.invoke(app, ["add-player", "--name", "T. Tester"])
        bad = raw_record(1, {"bowling": {"overs": 3.9, "runs_conceded": 10, "wickets": 0}})
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"matches": [bad]}), encoding="utf-8")
        result = runner.invoke(app, ["import", str(path)])
        assert result.exit_code == 1

    def test_players_and_set_active(self, db):
        runner.invoke(app, ["add-player", "--name", "A. One"])
        runner.invoke(app, ["add-player", "--name", "B. Two", "--inactive"])
        result = runner.invoke(app, ["players"])
        assert result.exit_code == 0, result.output
        assert "B. Two" in result.output
        result = runner.invoke(app, ["set-active", "2"])
        assert result.exit_code == 0, result.output
        assert "B. Two" in result.output
