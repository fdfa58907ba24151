"""Tests for the rollup aggregator."""

from datetime import date

import pytest

from cricket_stats.analytics import rollup
from cricket_stats.exceptions import RecordError
from cricket_stats.models import MatchFormat, VenueType
from cricket_stats.schemas import AnalyticsFilters, BowlingFigures

from factories import bat, bowl, make_pair, make_pairs, mixed_records, raw_record, scenario_records


# =========================================================================
# Career summary
# =========================================================================


class TestSummary:

    def test_two_match_scenario(self):
        summary = rollup.career_summary(make_pairs(*scenario_records()), overs_arithmetic="balls")

        assert summary.matches == 2
        assert summary.innings == 2
        assert summary.runs == 150
        assert summary.not_outs == 1
        assert summary.dismissals == 1
        assert summary.batting_average == 150.0
        assert summary.strike_rate == 125.0
        assert summary.fifties == 1
        assert summary.centuries == 1
        assert summary.wickets == 2
        assert summary.bowling_average == 37.5
        assert summary.economy == 8.33
        assert summary.matches_won == 1
        assert summary.matches_lost == 1
        assert summary.win_percentage == 50.0
        assert summary.overs == 9.0
        assert str(summary.highest_score) == "100*"
        assert str(summary.best_bowling) == "2/30"

    def test_empty_input(self):
        summary = rollup.summarize([])
        assert summary.matches == 0
        assert summary.runs == 0
        assert summary.innings == 0
        assert summary.batting_average is None
        assert summary.strike_rate == 0
        assert summary.bowling_average is None
        assert summary.bowling_strike_rate is None
        assert summary.economy == 0
        assert summary.highest_score is None
        assert summary.best_bowling is None
        assert summary.win_percentage == 0

        career = rollup.career_summary([])
        assert career.career_span.start_year is None
        assert career.career_span.years == 0

    def test_undefeated_has_no_average(self):
        pairs = make_pairs(
            raw_record(1, {"batting": bat(23, 20, "not_out")}),
            raw_record(2, {"batting": bat(41, 30, "not_out")}, date="2024-02-01"),
        )
        summary = rollup.summarize(pairs)
        assert summary.runs == 64
        assert summary.dismissals == 0
        assert summary.batting_average is None

    def test_mixed_career(self):
        summary = rollup.career_summary(make_pairs(*mixed_records()), overs_arithmetic="balls")

        assert summary.matches == 5
        assert summary.innings == 5
        assert summary.runs == 202
        assert summary.not_outs == 1
        assert summary.batting_average == 50.5
        assert summary.strike_rate == 62.54
        assert summary.ducks == 1
        assert summary.thirties == 2
        assert summary.centuries == 1
        assert str(summary.highest_score) == "110"
        assert summary.balls_bowled == 318
        assert summary.overs == 53.0
        assert summary.maidens == 6
        assert summary.runs_conceded == 210
        assert summary.wickets == 16
        assert summary.economy == 3.96
        assert summary.three_wicket_hauls == 3
        assert summary.four_wicket_hauls == 2
        assert summary.five_wicket_hauls == 1
        assert summary.ten_wicket_matches == 1
        assert str(summary.best_bowling) == "6/70"
        assert summary.catches == 3
        assert summary.run_outs == 1
        assert summary.stumpings == 1
        assert summary.fielding_dismissals == 5
        assert summary.matches_won == 2
        assert summary.matches_tied == 1
        assert summary.no_results == 1
        assert summary.win_percentage == 40.0
        assert summary.career_span.start_year == 2022
        assert summary.career_span.end_year == 2024
        assert summary.career_span.years == 3
        assert summary.captained == 1
        assert summary.keeping_matches == 1

    def test_out_of_range_values_contribute_zero(self):
        pair = make_pair(1, {"batting": bat(30, 20), "bowling": bowl(2, 10, 1)})
        broken = pair.model_copy(update={
            "performance": pair.performance.model_copy(update={
                "batting": pair.performance.batting.model_copy(update={"runs": -40}),
            }),
        })
        summary = rollup.summarize([broken, make_pair(2, {"batting": bat(12, 10)}, date="2024-03-01")])
        assert summary.runs == 12
        assert summary.wickets == 1


class TestTieBreaks:

    def test_fewer_runs_wins_on_equal_wickets(self):
        pairs = make_pairs(
            raw_record(1, {"bowling": bowl(10, 40, 3)}),
            raw_record(2, {"bowling": bowl(10, 25, 3)}, date="2024-02-01"),
        )
        assert rollup.summarize(pairs).best_bowling == BowlingFigures(wickets=3, runs=25)

    def test_more_wickets_always_wins(self):
        pairs = make_pairs(
            raw_record(1, {"bowling": bowl(4, 10, 2)}),
            raw_record(2, {"bowling": bowl(10, 50, 3)}, date="2024-02-01"),
        )
        assert rollup.summarize(pairs).best_bowling == BowlingFigures(wickets=3, runs=50)

    def test_not_out_beats_out_on_equal_runs(self):
        pairs = make_pairs(
            raw_record(1, {"batting": bat(100, 90, "caught")}),
            raw_record(2, {"batting": bat(100, 95, "not_out")}, date="2024-02-01"),
        )
        highest = rollup.summarize(pairs).highest_score
        assert highest.runs == 100
        assert highest.is_not_out


# =========================================================================
# Partitioned breakdowns
# =========================================================================


class TestBreakdowns:

    @pytest.fixture
    def pairs(self):
        return make_pairs(*mixed_records())

    def test_format_order(self, pairs):
        formats = rollup.format_breakdown(pairs)
        assert [f.format for f in formats] == [MatchFormat.ODI, MatchFormat.T20, MatchFormat.TEST]
        assert [f.matches for f in formats] == [2, 2, 1]

    def test_year_order(self, pairs):
        years = rollup.yearly_breakdown(pairs)
        assert [y.year for y in years] == [2022, 2023, 2024]

    def test_opponent_exact_key(self, pairs):
        opponents = rollup.opponent_breakdown(pairs)
        assert [o.opponent for o in opponents] == ["Australia", "England", "South Africa", "england"]
        assert opponents[0].matches == 2

    def test_venue_order_by_runs(self, pairs):
        venues = rollup.venue_breakdown(pairs)
        assert [v.venue for v in venues] == ["Newlands", "Wankhede Stadium", "Lord's"]
        assert venues[0].runs == 145
        assert (venues[1].city, venues[1].country) == ("Mumbai", "India")

    def test_home_away(self, pairs):
        split = rollup.home_away_breakdown(pairs)
        assert split.home.matches == 1
        assert split.away.matches == 2
        assert split.neutral.matches == 1
        assert split.unspecified.matches == 1

    def test_home_away_groups_present_when_empty(self):
        split = rollup.home_away_breakdown([])
        assert split.home.matches == 0
        assert split.away.batting_average is None

    def test_positions_counted_per_innings(self, pairs):
        positions = rollup.position_breakdown(pairs)
        assert [p.position for p in positions] == [1, 3, 4]
        third = positions[1]
        assert third.innings == 3
        assert third.matches == 3
        assert third.runs == 80
        assert third.not_outs == 1

    @pytest.mark.parametrize("breakdown", [
        rollup.format_breakdown,
        rollup.yearly_breakdown,
        rollup.opponent_breakdown,
        rollup.venue_breakdown,
    ])
    def test_partitions_sum_to_career(self, pairs, breakdown):
        career = rollup.summarize(pairs)
        parts = breakdown(pairs)
        assert sum(p.matches for p in parts) == career.matches
        assert sum(p.runs for p in parts) == career.runs
        assert sum(p.wickets for p in parts) == career.wickets

    def test_home_away_sums_to_career(self, pairs):
        career = rollup.summarize(pairs)
        split = rollup.home_away_breakdown(pairs)
        groups = [split.home, split.away, split.neutral, split.unspecified]
        assert sum(g.matches for g in groups) == career.matches
        assert sum(g.runs for g in groups) == career.runs

    @pytest.fixture
    def series_pairs(self):
        records = mixed_records()
        for record, (series_id, name) in zip(records, [(7, "Asia Cup"), (7, "Asia Cup"), (3, "Freedom Trophy")]):
            record["match"].update(series_id=series_id, series_name=name)
        return make_pairs(*records)

    def test_series_order_and_totals(self, series_pairs):
        series = rollup.series_breakdown(series_pairs)
        assert [(s.series_id, s.series_name) for s in series] == [(7, "Asia Cup"), (3, "Freedom Trophy")]
        assert [s.matches for s in series] == [2, 1]
        assert series[0].runs == 57
        assert series[1].wickets == 10
        assert series[1].fielding_dismissals == 3

    def test_series_sum_to_matches_in_a_series(self, series_pairs):
        in_series = rollup.summarize([p for p in series_pairs if p.match.series_id is not None])
        parts = rollup.series_breakdown(series_pairs)
        assert sum(p.matches for p in parts) == in_series.matches == 3
        assert sum(p.runs for p in parts) == in_series.runs
        assert sum(p.wickets for p in parts) == in_series.wickets

    def test_series_breakdown_ignores_series_filter(self, series_pairs):
        series = rollup.series_breakdown(series_pairs, AnalyticsFilters(series_id=3))
        assert len(series) == 2

    def test_no_series(self, pairs):
        assert rollup.series_breakdown(pairs) == []


class TestDismissalsAndConversion:

    def test_histogram_has_every_type(self):
        histogram = rollup.dismissal_histogram(make_pairs(*mixed_records()))
        data = histogram.model_dump()
        assert set(data) >= {"caught", "bowled", "lbw", "run_out", "stumped", "hit_wicket",
                             "not_out", "retired_hurt"}
        assert histogram.caught == 2
        assert histogram.bowled == 1
        assert histogram.lbw == 1
        assert histogram.not_out == 1
        assert histogram.stumped == 0
        assert histogram.total == 5

    def test_conversion_rates(self):
        records = [
            raw_record(i, {"batting": bat(runs, runs + 10)}, date=f"2024-01-{i:02d}")
            for i, runs in enumerate([5, 12, 35, 60, 120], start=1)
        ]
        rates = rollup.conversion_rates(make_pairs(*records), start_runs=10)
        assert (rates.starts, rates.thirties, rates.fifties, rates.hundreds) == (4, 3, 2, 1)
        assert rates.start_to_thirty == 75.0
        assert rates.thirty_to_fifty == 66.67
        assert rates.fifty_to_hundred == 50.0

    def test_zero_start_threshold_counts_every_innings(self):
        records = [
            raw_record(i, {"batting": bat(runs, runs + 10)}, date=f"2024-01-{i:02d}")
            for i, runs in enumerate([0, 5, 35], start=1)
        ]
        rates = rollup.conversion_rates(make_pairs(*records), start_runs=0)
        assert rates.start_threshold == 0
        assert rates.starts == 3
        assert rates.start_to_thirty == 33.33

    def test_conversion_without_innings(self):
        rates = rollup.conversion_rates([], start_runs=10)
        assert rates.start_to_thirty == 0.0
        assert rates.fifty_to_hundred == 0.0


class TestTrend:

    def test_running_figures(self):
        pairs = make_pairs(
            raw_record(1, {"batting": bat(30, 20, "not_out"), "bowling": bowl(4, 24, 1)}),
            raw_record(2, {"batting": bat(20, 30, "caught"), "bowling": bowl(4, 36, 2)}, date="2024-02-01"),
        )
        points = rollup.trend(pairs, overs_arithmetic="balls")
        assert [p.cumulative_runs for p in points] == [30, 50]
        assert [p.cumulative_wickets for p in points] == [1, 3]
        assert points[0].running_average is None
        assert points[1].running_average == 50.0
        assert points[1].running_strike_rate == 100.0
        assert points[0].running_economy == 6.0
        assert points[1].running_economy == 7.5


# =========================================================================
# Filters
# =========================================================================


class TestFilters:

    @pytest.fixture
    def pairs(self):
        return make_pairs(*mixed_records())

    def test_opponent_substring_case_insensitive(self, pairs):
        kept = rollup.apply_filters(pairs, AnalyticsFilters(opponent="ENG"))
        assert [p.match.id for p in kept] == [2, 5]

    def test_venue_and_format(self, pairs):
        kept = rollup.apply_filters(pairs, AnalyticsFilters(venue="wankhede", format=MatchFormat.ODI))
        assert [p.match.id for p in kept] == [1, 5]

    def test_date_range(self, pairs):
        filters = AnalyticsFilters(start_date=date(2022, 6, 1), end_date=date(2023, 12, 31))
        assert [p.match.id for p in rollup.apply_filters(pairs, filters)] == [2, 3, 4]

    def test_home_away(self, pairs):
        kept = rollup.apply_filters(pairs, AnalyticsFilters(home_away=VenueType.AWAY))
        assert [p.match.id for p in kept] == [2, 3]

    def test_breakdown_ignores_filter_on_own_key(self, pairs):
        formats = rollup.format_breakdown(pairs, AnalyticsFilters(format=MatchFormat.ODI))
        assert len(formats) == 3

    def test_breakdown_applies_other_filters(self, pairs):
        formats = rollup.format_breakdown(pairs, AnalyticsFilters(opponent="australia"))
        assert {f.format for f in formats} == {MatchFormat.ODI, MatchFormat.T20}


# =========================================================================
# Category payloads
# =========================================================================


class TestCategoryPayloads:

    def test_bowling(self):
        bowling = rollup.bowling_analytics(make_pairs(*mixed_records()), overs_arithmetic="balls")
        assert bowling.innings == 5
        assert bowling.maidens == 6
        assert bowling.best_innings == BowlingFigures(wickets=6, runs=70)
        assert bowling.best_match == BowlingFigures(wickets=10, runs=110)
        assert bowling.ten_wicket_matches == 1
        by_format = {b.format: b for b in bowling.by_format}
        assert str(by_format[MatchFormat.T20].best_innings) == "3/20"
        assert str(by_format[MatchFormat.ODI].best_match) == "1/52"

    def test_fielding(self):
        fielding = rollup.fielding_analytics(make_pairs(*mixed_records()))
        assert fielding.matches == 5
        assert fielding.total_dismissals == 5
        assert fielding.dismissals_per_match == 1.0
        assert fielding.captained == 1
        assert fielding.keeping_matches == 1
        assert [line.format for line in fielding.by_format] == [MatchFormat.ODI, MatchFormat.T20, MatchFormat.TEST]
        assert fielding.by_format[2].total_dismissals == 3


# =========================================================================
# Overs arithmetic modes
# =========================================================================


class TestOversArithmetic:

    @pytest.fixture
    def records(self):
        return [raw_record(1, {
            "first_innings_bowling": bowl(4.3, 30, 2),
            "second_innings_bowling": bowl(5.4, 40, 1),
        }, format="Test")]

    def test_balls_mode(self, records):
        summary = rollup.summarize(make_pairs(*records), overs_arithmetic="balls")
        assert summary.overs == 10.1
        assert summary.economy == 6.89

    def test_legacy_mode(self, records):
        summary = rollup.summarize(make_pairs(*records, overs_arithmetic="legacy"), overs_arithmetic="legacy")
        assert summary.overs == 9.7
        assert summary.economy == 7.22


# =========================================================================
# Input handling
# =========================================================================


class TestBuildPairs:

    def test_sorted_by_date(self):
        pairs = make_pairs(
            raw_record(2, {"batting": bat(1, 1)}, date="2024-05-01"),
            raw_record(1, {"batting": bat(2, 2)}, date="2024-01-01"),
        )
        assert [p.match.id for p in pairs] == [1, 2]

    def test_malformed_record_names_ids(self):
        with pytest.raises(RecordError) as exc_info:
            make_pairs(raw_record(7, {"bowling": bowl(4.6, 20, 1)}))
        assert exc_info.value.match_id == 7
        assert exc_info.value.performance_id == 7
        assert "match_id=7" in str(exc_info.value)

    def test_shape_mismatch_is_record_error(self):
        with pytest.raises(RecordError):
            make_pairs(raw_record(3, {"batting": bat(10, 10)}, format="Test"))

    def test_determinism(self):
        first = rollup.career_summary(make_pairs(*mixed_records())).model_dump_json()
        second = rollup.career_summary(make_pairs(*mixed_records())).model_dump_json()
        assert first == second
