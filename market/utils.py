"""Small numeric helpers shared across the market engine."""

import math


def clamp(value, lo, hi):
    """Clamp ``value`` to ``[lo, hi]``."""
    return max(lo, min(hi, value))


def round_half_up(value: float) -> int:
    """Round .5 away from zero toward +inf, unlike Python's banker's round()."""
    return int(math.floor(value + 0.5))
