"""
Rounding helpers.
"""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def percentage(part: int, whole: int) -> int:
    """round_half_up(100 * part / whole), 0 when whole is 0."""
    if whole <= 0:
        return 0
    return round_half_up(part / whole * 100)
