"""Derived-field calculator for a single performance.

Every derived field is a pure function of the raw inputs, recomputed on each
write. Did-not-bat / did-not-bowl sub-records are returned untouched.
"""

from __future__ import annotations

from typing import Optional, Union

from ..config import settings
from ..models.performances import DismissalType
from ..schemas.performances import (
    BATTING_SLOTS,
    BOWLING_SLOTS,
    Fielding,
    InningsBatting,
    InningsBowling,
    PerformanceCreate,
    PerformanceRecord,
)
from ..utils.overs import balls_to_overs, overs_to_balls, true_overs


def _pct(part: float, whole: float) -> float:
    return round(part / whole * 100, 2) if whole > 0 else 0.0


def derive_batting(innings: InningsBatting) -> InningsBatting:
    """Recompute strike rate, boundary and milestone fields."""
    if innings.did_not_bat:
        return innings

    boundary_runs = innings.fours * 4 + innings.sixes * 6
    is_not_out = innings.dismissal_type == DismissalType.NOT_OUT
    return innings.model_copy(update={
        "strike_rate": _pct(innings.runs, innings.balls_faced),
        "boundary_runs": boundary_runs,
        "boundary_percentage": _pct(boundary_runs, innings.runs),
        "is_not_out": is_not_out,
        "is_duck": innings.runs == 0 and not is_not_out,
        "is_fifty": 50 <= innings.runs < 100,
        "is_century": innings.runs >= 100,
    })


def derive_bowling(innings: InningsBowling, overs_arithmetic: Optional[str] = None) -> InningsBowling:
    """Recompute balls bowled, economy, strike rate, average and haul flags."""
    if innings.did_not_bowl:
        return innings

    mode = overs_arithmetic or settings.analytics.overs_arithmetic
    balls = overs_to_balls(innings.overs)
    overs = innings.overs if mode == "legacy" else true_overs(balls)
    wickets = innings.wickets

    if wickets > 0:
        strike_rate: Optional[float] = round(balls / wickets, 2)
        average: Optional[float] = round(innings.runs_conceded / wickets, 2)
    else:
        strike_rate = None
        average = None

    return innings.model_copy(update={
        "balls_bowled": balls,
        "economy": round(innings.runs_conceded / overs, 2) if overs > 0 else 0.0,
        "bowling_strike_rate": strike_rate,
        "bowling_average": average,
        "is_three_wicket_haul": wickets >= 3,
        "is_four_wicket_haul": wickets >= 4,
        "is_five_wicket_haul": wickets >= 5,
    })


def derive_fielding(fielding: Fielding) -> Fielding:
    return fielding.model_copy(update={
        "total_dismissals": fielding.catches + fielding.run_outs + fielding.stumpings,
    })


def derive_fields(
    performance: Union[PerformanceCreate, PerformanceRecord],
    overs_arithmetic: Optional[str] = None,
) -> PerformanceRecord:
    """Return a copy of ``performance`` with all derived fields recomputed.

    Match-level aggregates sum every present sub-record that was not marked
    did-not-bat / did-not-bowl. In "balls" mode match overs are the packed
    notation of the summed balls (4.3 + 5.4 -> 10.1); in "legacy" mode they
    are the plain decimal sum.
    """
    mode = overs_arithmetic or settings.analytics.overs_arithmetic
    update: dict = {"fielding": derive_fielding(performance.fielding)}

    runs = balls_faced = 0
    for slot in BATTING_SLOTS:
        innings = getattr(performance, slot)
        if innings is None:
            continue
        innings = derive_batting(innings)
        update[slot] = innings
        if not innings.did_not_bat:
            runs += innings.runs
            balls_faced += innings.balls_faced

    wickets = balls_bowled = runs_conceded = 0
    decimal_overs = 0.0
    for slot in BOWLING_SLOTS:
        innings = getattr(performance, slot)
        if innings is None:
            continue
        innings = derive_bowling(innings, mode)
        update[slot] = innings
        if not innings.did_not_bowl:
            wickets += innings.wickets
            balls_bowled += innings.balls_bowled
            runs_conceded += innings.runs_conceded
            decimal_overs += innings.overs

    update.update({
        "match_runs": runs,
        "match_balls_faced": balls_faced,
        "match_wickets": wickets,
        "match_balls_bowled": balls_bowled,
        "match_runs_conceded": runs_conceded,
        "match_overs": round(decimal_overs, 1) if mode == "legacy" else balls_to_overs(balls_bowled),
    })

    base = performance.model_dump(exclude=set(update))
    record = PerformanceRecord.model_validate(base)
    return record.model_copy(update=update)
