"""Percentage arithmetic used for display."""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounding towards +infinity.

    Python's :func:`round` uses banker's rounding (``round(12.5) == 12``);
    displayed percentages round halves up (``12.5 -> 13``).
    """
    return math.floor(value + 0.5)


def utilization(numerator: int, denominator: int) -> int:
    """Rounded percentage of *numerator* over *denominator*.

    A zero denominator yields 0 whatever the numerator::

        >>> utilization(1, 3)
        33
        >>> utilization(5, 0)
        0
    """
    if denominator <= 0:
        return 0
    return round_half_up(numerator / max(denominator, 1) * 100)
