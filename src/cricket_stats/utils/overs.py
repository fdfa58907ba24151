"""Cricket overs notation helpers.

Overs are written in packed notation: the fractional digit counts balls in
the current over, so 4.3 means 4 overs and 3 balls (27 balls), never 4.3
true overs. Arithmetic on overs should go through balls.
"""

from __future__ import annotations

from typing import Union

OversLike = Union[str, int, float]

BALLS_PER_OVER = 6


def overs_to_balls(overs: OversLike) -> int:
    """Convert packed overs notation to balls.

    Accepts "19.4", 19.4, 20 or "20". The balls part is a single digit 0-5.
    """
    if overs is None:
        raise ValueError("Overs cannot be None")

    s = str(overs).strip()
    if not s:
        raise ValueError("Overs cannot be empty")
    if s.startswith("-"):
        raise ValueError(f"Invalid overs: {overs}")

    if "." not in s:
        return int(s) * BALLS_PER_OVER

    ov_part, ball_part = s.split(".", 1)
    ov_i = int(ov_part) if ov_part else 0
    ball_part = ball_part.strip() or "0"

    if len(ball_part) != 1 or not ball_part.isdigit():
        raise ValueError(f"Invalid overs format: {overs} (expected one balls digit)")
    balls_i = int(ball_part)
    if balls_i > 5:
        raise ValueError(f"Invalid overs format: {overs} (balls part must be 0-5)")

    return ov_i * BALLS_PER_OVER + balls_i


def balls_to_overs(balls: int) -> float:
    """Convert balls back to packed overs notation (27 -> 4.3)."""
    if balls <= 0:
        return 0.0
    full, rest = divmod(int(balls), BALLS_PER_OVER)
    return float(f"{full}.{rest}")


def true_overs(balls: int) -> float:
    """Overs as a real number of six-ball units (27 -> 4.5)."""
    if balls <= 0:
        return 0.0
    return balls / BALLS_PER_OVER
