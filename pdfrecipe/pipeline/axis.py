from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List

from .errors import InvalidInputError


DEFAULT_TICK_COUNT = 5


@dataclass(frozen=True)
class Tick:
    value: float
    y: float

    @property
    def label(self) -> str:
        return f"{self.value:.0f}"


def nice_max(raw_max: float) -> float:
    """Round ``raw_max`` up to a whole multiple of its own power of ten (342 -> 400)."""
    if not math.isfinite(raw_max):
        raise InvalidInputError(f"Axis maximum must be finite, got {raw_max!r}")
    # the smallest step is 10, so single-digit data still gets a 0..10 axis
    place = 10.0
    while raw_max >= place * 10.0:
        place *= 10.0
    return math.ceil(raw_max / place) * place


def y_axis_ticks(axis_max: float, tick_count: int, axis_top: float, axis_height: float) -> List[Tick]:
    # the top tick and the zero line both count, so there is one interval fewer
    intervals = tick_count - 1
    if intervals < 1:
        raise InvalidInputError(f"A y-axis needs at least 2 ticks, got {tick_count}")
    step_value = axis_max / intervals
    step_y = axis_height / intervals
    return [Tick(value=axis_max - i * step_value, y=axis_top + i * step_y) for i in range(intervals + 1)]
