"""Periodic deadlines with an optional random-looking bias."""

from __future__ import annotations

import math
import time
from collections.abc import Callable
from datetime import timedelta
from fractions import Fraction

__all__ = ["Ticks", "PERIOD_THRESHOLD"]

_NANOS = 1_000_000_000
# Periods of a year or longer disable the ticks.
PERIOD_THRESHOLD = 365 * 24 * 3600 * _NANOS


def _to_nanos(period: timedelta | float | int) -> int:
    if isinstance(period, timedelta):
        return (period.days * 86_400 + period.seconds) * _NANOS + period.microseconds * 1_000
    if isinstance(period, float) and math.isinf(period):
        return PERIOD_THRESHOLD
    if period < 0:
        raise ValueError(f"period must not be negative: {period!r}")
    return round(Fraction(period) * _NANOS)


def _mul_f64(nanos: int, factor: float) -> int:
    secs = (nanos // _NANOS) + (nanos % _NANOS) / 1e9
    return round(Fraction(factor * secs) * _NANOS)


class Ticks:
    """Deadlines every ``period``, shifted by up to ``max_bias`` of a period.

    ``clock`` returns a monotonic time in integer nanoseconds.
    """

    def __init__(self, clock: Callable[[], int] = time.monotonic_ns) -> None:
        self._clock = clock
        self._period: int | None = None
        self._max_bias = 0.0
        self._origin = clock()
        self._next_at: int | None = None

    def set_period(self, period: timedelta | float | int | None) -> None:
        """Set the period; None disables the ticks."""
        self._period = None if period is None else _to_nanos(period)

    def set_period_bias(self, max_bias: float) -> None:
        """Set the largest bias as a fraction of the period, clamped to [0, 1]."""
        self._max_bias = min(max(max_bias, 0.0), 1.0)

    def time_left(self) -> float | None:
        """Seconds until the next deadline, or None if none is scheduled."""
        if self._next_at is None:
            return None
        return max(self._next_at - self._clock(), 0) / 1e9

    def reached(self) -> bool:
        """Whether the scheduled deadline has passed."""
        return self._next_at is not None and self._clock() >= self._next_at

    def reschedule(self) -> None:
        """Compute the next deadline from the current time."""
        self._next_at = self._calc_next_at()

    def _calc_next_at(self) -> int | None:
        period = self._period
        if period is None or period >= PERIOD_THRESHOLD or period == 0:
            return None

        now = self._clock()
        elapsed = now - self._origin

        coef = ((elapsed % _NANOS) & 0xFFFF) / 65535.0
        max_bias = _mul_f64(period, self._max_bias)
        bias = _mul_f64(max_bias, coef)
        n = elapsed // period

        next_at = self._origin + period * (n + 1) + 2 * bias - max_bias

        # After skipping missed ticks the deadline may fall into the biased zone.
        if next_at <= now:
            return next_at + period
        return next_at