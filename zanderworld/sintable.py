"""Fixed-point sine lookup used by the landscape generator."""

from __future__ import annotations

import math

_STEPS = 1024
_SCALE = 0x7FFFFFFF


def _sample(index: int) -> int:
    """One table entry: the sine at ``index / 1024`` of a turn, truncated toward zero."""
    return int(math.sin(2.0 * math.pi * index / _STEPS) * _SCALE)


SINE_TABLE: tuple[int, ...] = tuple(_sample(i) for i in range(_STEPS))
"""1024 signed 32-bit samples of one sine period, scaled to the int32 range."""


def zsin(v: int) -> int:
    """Sine of a 32-bit fixed-point angle, where 2**32 is one full turn."""
    return SINE_TABLE[(v >> 22) & 1023]