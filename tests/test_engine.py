"""Tests for the analytics engine."""

import pytest

from cricket_stats.analytics import AnalyticsEngine
from cricket_stats.config import AnalyticsSettings, Settings
from cricket_stats.exceptions import RecordError
from cricket_stats.schemas import AnalyticsFilters

from factories import make_pairs, mixed_records, raw_record, bat


@pytest.fixture
def engine():
    return AnalyticsEngine(1, Settings(analytics=AnalyticsSettings(overs_arithmetic="balls")))


@pytest.fixture
def pairs():
    return make_pairs(*mixed_records())


class TestAnalyticsEngine:

    def test_report_has_every_category(self, engine, pairs):
        report = engine.report(pairs)
        assert report.player_id == 1
        assert report.career.summary.matches == 5
        assert len(report.career.trend) == 5
        assert len(report.career.formats) == 3
        assert report.batting.dismissals.total == 5
        assert report.bowling.wickets == 16
        assert report.fielding.total_dismissals == 5

    def test_career_includes_series(self, engine):
        records = mixed_records()
        records[2]["match"]["series_name"] = "Freedom Trophy"
        career = engine.career(make_pairs(*records))
        assert [s.series_name for s in career.series] == ["Freedom Trophy"]
        assert career.series[0].runs == 145

    def test_categories_are_independent(self, engine, pairs):
        report = engine.report(pairs)
        assert engine.batting(pairs) == report.batting
        assert engine.bowling(pairs) == report.bowling
        assert engine.fielding(pairs) == report.fielding
        assert engine.career(pairs) == report.career

    def test_idempotent(self, engine, pairs):
        assert engine.report(pairs).model_dump_json() == engine.report(pairs).model_dump_json()

    def test_input_order_does_not_matter(self, engine, pairs):
        assert engine.report(list(reversed(pairs))) == engine.report(pairs)

    def test_compute_subset(self, engine, pairs):
        results = engine.compute(pairs, ["bowling"])
        assert list(results) == ["bowling"]

    def test_unknown_category(self, engine, pairs):
        with pytest.raises(ValueError):
            engine.compute(pairs, ["predictive"])

    def test_empty_career(self, engine):
        report = engine.report([])
        assert report.career.summary.matches == 0
        assert report.career.formats == []
        assert report.batting.home_away.home.matches == 0
        assert report.bowling.best_innings is None
        assert report.fielding.dismissals_per_match == 0.0

    def test_filters_applied_before_aggregation(self, engine, pairs):
        career = engine.career(pairs, AnalyticsFilters(opponent="australia"))
        assert career.summary.matches == 2
        assert [p.match_id for p in career.trend] == [1, 4]

    def test_rejects_other_players_records(self, engine):
        foreign = make_pairs(raw_record(9, {"batting": bat(10, 10), "player_id": 2}))
        with pytest.raises(RecordError):
            engine.report(foreign)

    def test_conversion_threshold_from_settings(self, pairs):
        engine = AnalyticsEngine(1, Settings(analytics=AnalyticsSettings(conversion_start_runs=20)))
        assert engine.batting(pairs).conversion.start_threshold == 20
        assert engine.batting(pairs).conversion.starts == 3
