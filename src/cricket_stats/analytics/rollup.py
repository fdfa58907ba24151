"""Rollup aggregator: partition (match, performance) pairs, then reduce.

Every grouped summary (format, year, opponent, venue, series, home/away,
batting position) is produced by the same two steps: ``partition`` the pairs by a
key, then ``summarize`` each group with the formulas used for the career
total. Inputs are expected in match-date order; outputs are sorted
deterministically so the same data always serializes to the same JSON.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Callable, Dict, Hashable, Iterable, List, Mapping, Optional

from loguru import logger
from pydantic import ValidationError

from ..config import settings
from ..exceptions import RecordError
from ..models.matches import MatchResult, VenueType
from ..models.performances import DismissalType
from ..schemas.analytics import (
    AnalyticsFilters,
    BattingPositionStats,
    BowlingAnalytics,
    BowlingFigures,
    CareerSpan,
    CareerSummary,
    ConversionRates,
    DismissalTypeHistogram,
    FieldingAnalytics,
    FieldingLine,
    FormatBowlingBest,
    FormatStats,
    HighestScore,
    HomeAwayStats,
    OpponentStats,
    PartitionStats,
    SeriesStats,
    TrendPoint,
    VenueStats,
    YearlyStats,
)
from ..schemas.matches import MatchRecord
from ..schemas.performances import (
    InningsBatting,
    InningsBowling,
    PerformanceCreate,
    RecordPair,
)
from ..utils.overs import balls_to_overs, true_overs
from .calculator import derive_fields


KeyFn = Callable[[RecordPair], Hashable]


def _n(value: Any) -> int:
    """Non-negative integer contribution; anything else counts as zero."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return int(value) if value > 0 else 0


def _f(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value) if value > 0 else 0.0


def _ratio(num: float, den: float, scale: float = 1.0, ndigits: int = 2) -> Optional[float]:
    if den <= 0:
        return None
    return round(num / den * scale, ndigits)


def _mode(overs_arithmetic: Optional[str]) -> str:
    return overs_arithmetic or settings.analytics.overs_arithmetic


# ---------------------------------------------------------------------------
# Input handling
# ---------------------------------------------------------------------------

def sort_pairs(pairs: Iterable[RecordPair]) -> List[RecordPair]:
    """Order pairs by match date, then match id (stable for unsaved pairs)."""
    return sorted(pairs, key=lambda p: (p.match.date, p.match.id or 0))


def build_pairs(
    raw: Iterable[Mapping[str, Any]],
    overs_arithmetic: Optional[str] = None,
) -> List[RecordPair]:
    """Validate raw ``{"match": ..., "performance": ...}`` mappings.

    Derived fields are recomputed for every performance. The first
    malformed entry raises ``RecordError`` naming its match and performance
    ids; nothing is skipped silently.
    """
    pairs = []
    for item in raw:
        match_data = item.get("match") or {}
        perf_data = item.get("performance") or {}
        match_id = match_data.get("id")
        performance_id = perf_data.get("id")
        try:
            match = MatchRecord.model_validate(match_data)
            performance = derive_fields(PerformanceCreate.model_validate(perf_data), overs_arithmetic)
            performance = performance.model_copy(update={
                "id": performance_id,
                "match_id": match.id,
            })
            pairs.append(RecordPair(match=match, performance=performance))
        except (ValidationError, ValueError) as e:
            raise RecordError("Malformed record", match_id, performance_id, cause=e) from e
    return sort_pairs(pairs)


def apply_filters(pairs: Iterable[RecordPair], filters: Optional[AnalyticsFilters]) -> List[RecordPair]:
    """Keep the pairs matching every set filter."""
    pairs = list(pairs)
    if filters is None:
        return pairs

    def keep(pair: RecordPair) -> bool:
        m = pair.match
        if filters.format and m.format != filters.format:
            return False
        if filters.level and m.level != filters.level:
            return False
        if filters.opponent and filters.opponent.lower() not in m.opponent.lower():
            return False
        if filters.series_id is not None and m.series_id != filters.series_id:
            return False
        if filters.venue and filters.venue.lower() not in m.venue.lower():
            return False
        if filters.home_away and m.home_away != filters.home_away:
            return False
        if filters.start_date and m.date < filters.start_date:
            return False
        if filters.end_date and m.date > filters.end_date:
            return False
        return True

    return [p for p in pairs if keep(p)]


def _without(filters: Optional[AnalyticsFilters], *fields: str) -> Optional[AnalyticsFilters]:
    if filters is None:
        return None
    return filters.model_copy(update={name: None for name in fields})


# ---------------------------------------------------------------------------
# Partition / reduce
# ---------------------------------------------------------------------------

def partition(pairs: Iterable[RecordPair], key_fn: KeyFn) -> Dict[Hashable, List[RecordPair]]:
    """Group pairs by ``key_fn``; groups appear in first-seen order."""
    groups: Dict[Hashable, List[RecordPair]] = {}
    for pair in pairs:
        groups.setdefault(key_fn(pair), []).append(pair)
    return groups


def _played_batting(pair: RecordPair) -> List[InningsBatting]:
    return [i for i in pair.performance.batting_innings() if not i.did_not_bat]


def _played_bowling(pair: RecordPair) -> List[InningsBowling]:
    return [i for i in pair.performance.bowling_innings() if not i.did_not_bowl]


def _batting_totals(innings: List[InningsBatting]) -> Dict[str, Any]:
    runs = sum(_n(i.runs) for i in innings)
    balls = sum(_n(i.balls_faced) for i in innings)
    not_outs = sum(1 for i in innings if i.is_not_out)
    dismissals = len(innings) - not_outs

    highest: Optional[HighestScore] = None
    for i in innings:
        score = HighestScore(runs=_n(i.runs), is_not_out=i.is_not_out)
        if (
            highest is None
            or score.runs > highest.runs
            or (score.runs == highest.runs and score.is_not_out and not highest.is_not_out)
        ):
            highest = score

    return {
        "innings": len(innings),
        "runs": runs,
        "balls_faced": balls,
        "not_outs": not_outs,
        "dismissals": dismissals,
        "batting_average": _ratio(runs, dismissals),
        "strike_rate": _ratio(runs, balls, 100) or 0.0,
        "highest_score": highest,
        "thirties": sum(1 for i in innings if 30 <= _n(i.runs) < 50),
        "fifties": sum(1 for i in innings if i.is_fifty),
        "centuries": sum(1 for i in innings if i.is_century),
        "ducks": sum(1 for i in innings if i.is_duck),
        "fours": sum(_n(i.fours) for i in innings),
        "sixes": sum(_n(i.sixes) for i in innings),
    }


def _bowling_totals(innings: List[InningsBowling], mode: str) -> Dict[str, Any]:
    balls = sum(_n(i.balls_bowled) for i in innings)
    runs_conceded = sum(_n(i.runs_conceded) for i in innings)
    wickets = sum(_n(i.wickets) for i in innings)

    if mode == "legacy":
        overs = round(sum(_f(i.overs) for i in innings), 1)
        economy_overs = overs
        strike_balls = overs * 6
    else:
        overs = balls_to_overs(balls)
        economy_overs = true_overs(balls)
        strike_balls = balls

    best: Optional[BowlingFigures] = None
    for i in innings:
        figures = BowlingFigures(wickets=_n(i.wickets), runs=_n(i.runs_conceded))
        if figures.beats(best):
            best = figures

    return {
        "bowling_innings": len(innings),
        "overs": overs,
        "balls_bowled": balls,
        "maidens": sum(_n(i.maidens) for i in innings),
        "runs_conceded": runs_conceded,
        "wickets": wickets,
        "bowling_average": _ratio(runs_conceded, wickets),
        "economy": _ratio(runs_conceded, economy_overs) or 0.0,
        "bowling_strike_rate": _ratio(strike_balls, wickets),
        "best_bowling": best,
        "three_wicket_hauls": sum(1 for i in innings if i.is_three_wicket_haul),
        "four_wicket_hauls": sum(1 for i in innings if i.is_four_wicket_haul),
        "five_wicket_hauls": sum(1 for i in innings if i.is_five_wicket_haul),
    }


def _result_totals(pairs: List[RecordPair]) -> Dict[str, Any]:
    results = Counter(p.match.result for p in pairs)
    won = results[MatchResult.WON]
    return {
        "matches_won": won,
        "matches_lost": results[MatchResult.LOST],
        "matches_drawn": results[MatchResult.DRAW],
        "matches_tied": results[MatchResult.TIE],
        "no_results": results[MatchResult.NO_RESULT],
        "win_percentage": _ratio(won, len(pairs), 100, 1) or 0.0,
    }


def _fielding_totals(pairs: List[RecordPair]) -> Dict[str, int]:
    catches = sum(_n(p.performance.fielding.catches) for p in pairs)
    run_outs = sum(_n(p.performance.fielding.run_outs) for p in pairs)
    stumpings = sum(_n(p.performance.fielding.stumpings) for p in pairs)
    return {
        "catches": catches,
        "run_outs": run_outs,
        "stumpings": stumpings,
        "fielding_dismissals": catches + run_outs + stumpings,
    }


def _totals(pairs: List[RecordPair], mode: str) -> Dict[str, Any]:
    batting = [i for p in pairs for i in _played_batting(p)]
    bowling = [i for p in pairs for i in _played_bowling(p)]
    totals: Dict[str, Any] = {"matches": len(pairs)}
    totals.update(_batting_totals(batting))
    totals.update(_bowling_totals(bowling, mode))
    totals["ten_wicket_matches"] = sum(1 for p in pairs if _n(p.performance.match_wickets) >= 10)
    totals.update(_fielding_totals(pairs))
    totals.update(_result_totals(pairs))
    return totals


def summarize(pairs: Iterable[RecordPair], overs_arithmetic: Optional[str] = None) -> PartitionStats:
    """Reduce a group of pairs to a ``PartitionStats``.

    An empty group gives zero counts with ``None`` averages and zero rates.
    """
    return PartitionStats(**_totals(list(pairs), _mode(overs_arithmetic)))


def _grouped(model, pairs: List[RecordPair], key_fn: KeyFn, key_fields: Callable, mode: str) -> List[Any]:
    groups = partition(pairs, key_fn)
    logger.debug(f"{model.__name__}: {len(pairs)} matches in {len(groups)} partitions")
    return [model(**key_fields(key), **_totals(group, mode)) for key, group in groups.items()]


# ---------------------------------------------------------------------------
# Breakdowns
# ---------------------------------------------------------------------------

def format_breakdown(
    pairs: Iterable[RecordPair],
    filters: Optional[AnalyticsFilters] = None,
    overs_arithmetic: Optional[str] = None,
) -> List[FormatStats]:
    """Per-format stats, most matches first."""
    pairs = apply_filters(pairs, _without(filters, "format"))
    stats = _grouped(
        FormatStats, pairs, lambda p: p.match.format,
        lambda key: {"format": key}, _mode(overs_arithmetic),
    )
    return sorted(stats, key=lambda s: (-s.matches, s.format.value))


def yearly_breakdown(
    pairs: Iterable[RecordPair],
    filters: Optional[AnalyticsFilters] = None,
    overs_arithmetic: Optional[str] = None,
) -> List[YearlyStats]:
    """Per-calendar-year stats, oldest year first."""
    pairs = apply_filters(pairs, filters)
    stats = _grouped(
        YearlyStats, pairs, lambda p: p.match.date.year,
        lambda key: {"year": key}, _mode(overs_arithmetic),
    )
    return sorted(stats, key=lambda s: s.year)


def opponent_breakdown(
    pairs: Iterable[RecordPair],
    filters: Optional[AnalyticsFilters] = None,
    overs_arithmetic: Optional[str] = None,
) -> List[OpponentStats]:
    """Per-opponent stats keyed on the exact opponent name."""
    pairs = apply_filters(pairs, _without(filters, "opponent"))
    stats = _grouped(
        OpponentStats, pairs, lambda p: p.match.opponent,
        lambda key: {"opponent": key}, _mode(overs_arithmetic),
    )
    return sorted(stats, key=lambda s: (-s.matches, s.opponent))


def venue_breakdown(
    pairs: Iterable[RecordPair],
    filters: Optional[AnalyticsFilters] = None,
    overs_arithmetic: Optional[str] = None,
) -> List[VenueStats]:
    """Per-ground stats keyed on (venue, city, country), most runs first."""
    pairs = apply_filters(pairs, _without(filters, "venue"))
    stats = _grouped(
        VenueStats, pairs, lambda p: p.match.venue_key,
        lambda key: {"venue": key[0], "city": key[1], "country": key[2]},
        _mode(overs_arithmetic),
    )
    return sorted(stats, key=lambda s: (-s.runs, s.venue, s.city, s.country))


def series_breakdown(
    pairs: Iterable[RecordPair],
    filters: Optional[AnalyticsFilters] = None,
    overs_arithmetic: Optional[str] = None,
) -> List[SeriesStats]:
    """Per-series stats ordered by series name.

    Matches played outside a series are left out.
    """
    pairs = [
        p for p in apply_filters(pairs, _without(filters, "series_id"))
        if p.match.series_id is not None or p.match.series_name
    ]
    stats = _grouped(
        SeriesStats, pairs, lambda p: (p.match.series_id, p.match.series_name),
        lambda key: {"series_id": key[0], "series_name": key[1] or f"Series {key[0]}"},
        _mode(overs_arithmetic),
    )
    return sorted(stats, key=lambda s: (s.series_name, s.series_id or 0))


def home_away_breakdown(
    pairs: Iterable[RecordPair],
    filters: Optional[AnalyticsFilters] = None,
    overs_arithmetic: Optional[str] = None,
) -> HomeAwayStats:
    """Home, away and neutral stats; matches without the flag go to ``unspecified``."""
    mode = _mode(overs_arithmetic)
    groups = partition(apply_filters(pairs, _without(filters, "home_away")), lambda p: p.match.home_away)
    return HomeAwayStats(
        home=PartitionStats(**_totals(groups.get(VenueType.HOME, []), mode)),
        away=PartitionStats(**_totals(groups.get(VenueType.AWAY, []), mode)),
        neutral=PartitionStats(**_totals(groups.get(VenueType.NEUTRAL, []), mode)),
        unspecified=PartitionStats(**_totals(groups.get(None, []), mode)),
    )


def position_breakdown(
    pairs: Iterable[RecordPair],
    filters: Optional[AnalyticsFilters] = None,
) -> List[BattingPositionStats]:
    """Batting stats per batting position.

    Partitioned per innings, so a Test where the player opened and then batted
    at three counts towards both positions. Innings without a recorded
    position are left out.
    """
    by_position: Dict[int, List[InningsBatting]] = {}
    matches: Dict[int, set] = {}
    for index, pair in enumerate(apply_filters(pairs, filters)):
        for innings in _played_batting(pair):
            if innings.batting_position is None:
                continue
            by_position.setdefault(innings.batting_position, []).append(innings)
            matches.setdefault(innings.batting_position, set()).add(index)

    return [
        BattingPositionStats(position=position, matches=len(matches[position]), **_batting_totals(innings))
        for position, innings in sorted(by_position.items())
    ]


def career_summary(
    pairs: Iterable[RecordPair],
    filters: Optional[AnalyticsFilters] = None,
    overs_arithmetic: Optional[str] = None,
) -> CareerSummary:
    """Unpartitioned totals plus career span and captaincy/keeping counts."""
    pairs = apply_filters(pairs, filters)
    years = [p.match.date.year for p in pairs]
    span = CareerSpan()
    if years:
        span = CareerSpan(start_year=min(years), end_year=max(years), years=max(years) - min(years) + 1)
    return CareerSummary(
        career_span=span,
        captained=sum(1 for p in pairs if p.performance.is_captain),
        keeping_matches=sum(1 for p in pairs if p.performance.is_wicketkeeper),
        **_totals(pairs, _mode(overs_arithmetic)),
    )


def dismissal_histogram(
    pairs: Iterable[RecordPair],
    filters: Optional[AnalyticsFilters] = None,
) -> DismissalTypeHistogram:
    """Count batting innings by dismissal type; every type is always present."""
    counts = Counter()
    for pair in apply_filters(pairs, filters):
        for innings in _played_batting(pair):
            key = innings.dismissal_type.value if innings.dismissal_type else "unrecorded"
            counts[key] += 1
    return DismissalTypeHistogram(
        **{t.value: counts[t.value] for t in DismissalType},
        unrecorded=counts["unrecorded"],
    )


def conversion_rates(
    pairs: Iterable[RecordPair],
    filters: Optional[AnalyticsFilters] = None,
    start_runs: Optional[int] = None,
) -> ConversionRates:
    """Share of innings reaching each threshold that went on to the next one.

    A hundred counts as reaching every lower threshold too.
    """
    start = start_runs if start_runs is not None else settings.analytics.conversion_start_runs
    runs = [_n(i.runs) for p in apply_filters(pairs, filters) for i in _played_batting(p)]

    starts = sum(1 for r in runs if r >= start)
    thirties = sum(1 for r in runs if r >= 30)
    fifties = sum(1 for r in runs if r >= 50)
    hundreds = sum(1 for r in runs if r >= 100)

    return ConversionRates(
        start_threshold=start,
        starts=starts,
        thirties=thirties,
        fifties=fifties,
        hundreds=hundreds,
        start_to_thirty=_ratio(thirties, starts, 100) or 0.0,
        thirty_to_fifty=_ratio(fifties, thirties, 100) or 0.0,
        fifty_to_hundred=_ratio(hundreds, fifties, 100) or 0.0,
    )


def trend(
    pairs: Iterable[RecordPair],
    filters: Optional[AnalyticsFilters] = None,
    overs_arithmetic: Optional[str] = None,
) -> List[TrendPoint]:
    """One point per match with running career figures up to and including it."""
    mode = _mode(overs_arithmetic)
    points = []
    runs = wickets = balls_faced = dismissals = runs_conceded = balls_bowled = 0
    legacy_overs = 0.0

    for pair in apply_filters(pairs, filters):
        batting = _played_batting(pair)
        bowling = _played_bowling(pair)
        match_runs = sum(_n(i.runs) for i in batting)
        match_wickets = sum(_n(i.wickets) for i in bowling)

        runs += match_runs
        wickets += match_wickets
        balls_faced += sum(_n(i.balls_faced) for i in batting)
        dismissals += sum(1 for i in batting if not i.is_not_out)
        runs_conceded += sum(_n(i.runs_conceded) for i in bowling)
        balls_bowled += sum(_n(i.balls_bowled) for i in bowling)
        legacy_overs += sum(_f(i.overs) for i in bowling)

        overs = round(legacy_overs, 1) if mode == "legacy" else true_overs(balls_bowled)
        points.append(TrendPoint(
            match_id=pair.match.id,
            date=pair.match.date,
            opponent=pair.match.opponent,
            format=pair.match.format,
            runs=match_runs,
            wickets=match_wickets,
            cumulative_runs=runs,
            cumulative_wickets=wickets,
            running_average=_ratio(runs, dismissals),
            running_strike_rate=_ratio(runs, balls_faced, 100) or 0.0,
            running_economy=_ratio(runs_conceded, overs) or 0.0,
        ))
    return points


# ---------------------------------------------------------------------------
# Category payloads
# ---------------------------------------------------------------------------

def _best_match(pairs: List[RecordPair]) -> Optional[BowlingFigures]:
    best: Optional[BowlingFigures] = None
    for pair in pairs:
        bowling = _played_bowling(pair)
        if not bowling:
            continue
        figures = BowlingFigures(
            wickets=sum(_n(i.wickets) for i in bowling),
            runs=sum(_n(i.runs_conceded) for i in bowling),
        )
        if figures.beats(best):
            best = figures
    return best


def bowling_analytics(
    pairs: Iterable[RecordPair],
    filters: Optional[AnalyticsFilters] = None,
    overs_arithmetic: Optional[str] = None,
) -> BowlingAnalytics:
    """Career bowling figures with best innings/match figures per format."""
    mode = _mode(overs_arithmetic)
    pairs = apply_filters(pairs, filters)
    innings = [i for p in pairs for i in _played_bowling(p)]
    totals = _bowling_totals(innings, mode)

    by_format = []
    for fmt, group in partition(pairs, lambda p: p.match.format).items():
        group_innings = [i for p in group for i in _played_bowling(p)]
        if not group_innings:
            continue
        by_format.append(FormatBowlingBest(
            format=fmt,
            best_innings=_bowling_totals(group_innings, mode)["best_bowling"],
            best_match=_best_match(group),
        ))
    by_format.sort(key=lambda b: b.format.value)

    return BowlingAnalytics(
        innings=totals["bowling_innings"],
        overs=totals["overs"],
        balls_bowled=totals["balls_bowled"],
        maidens=totals["maidens"],
        wides=sum(_n(i.wides) for i in innings),
        no_balls=sum(_n(i.no_balls) for i in innings),
        runs_conceded=totals["runs_conceded"],
        wickets=totals["wickets"],
        bowling_average=totals["bowling_average"],
        economy=totals["economy"],
        bowling_strike_rate=totals["bowling_strike_rate"],
        three_wicket_hauls=totals["three_wicket_hauls"],
        four_wicket_hauls=totals["four_wicket_hauls"],
        five_wicket_hauls=totals["five_wicket_hauls"],
        ten_wicket_matches=sum(1 for p in pairs if _n(p.performance.match_wickets) >= 10),
        best_innings=totals["best_bowling"],
        best_match=_best_match(pairs),
        by_format=by_format,
    )


def fielding_analytics(
    pairs: Iterable[RecordPair],
    filters: Optional[AnalyticsFilters] = None,
) -> FieldingAnalytics:
    """Career fielding totals and per-format lines."""
    pairs = apply_filters(pairs, filters)
    totals = _fielding_totals(pairs)

    lines = []
    for fmt, group in partition(pairs, lambda p: p.match.format).items():
        group_totals = _fielding_totals(group)
        lines.append(FieldingLine(
            format=fmt,
            matches=len(group),
            catches=group_totals["catches"],
            run_outs=group_totals["run_outs"],
            stumpings=group_totals["stumpings"],
            total_dismissals=group_totals["fielding_dismissals"],
        ))
    lines.sort(key=lambda line: (-line.matches, line.format.value))

    return FieldingAnalytics(
        matches=len(pairs),
        catches=totals["catches"],
        run_outs=totals["run_outs"],
        stumpings=totals["stumpings"],
        total_dismissals=totals["fielding_dismissals"],
        dismissals_per_match=_ratio(totals["fielding_dismissals"], len(pairs)) or 0.0,
        captained=sum(1 for p in pairs if p.performance.is_captain),
        keeping_matches=sum(1 for p in pairs if p.performance.is_wicketkeeper),
        by_format=lines,
    )
