"""Domain value objects for ranges, range policies and precision tiers."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

import numpy as np

logger = logging.getLogger(__name__)


class ExceedAction(Enum):
    """What a range does when it receives a value outside its bounds."""

    SILENT = "silent"
    WARN = "warn"
    FAIL = "fail"


class RepeatPolicy(Enum):
    """Sides on which an out-of-range value is wrapped instead of clamped."""

    NONE = "none"
    BELOW_MIN = "below_min"
    ABOVE_MAX = "above_max"
    BOTH = "both"

    @property
    def wraps_below(self) -> bool:
        return self in (RepeatPolicy.BELOW_MIN, RepeatPolicy.BOTH)

    @property
    def wraps_above(self) -> bool:
        return self in (RepeatPolicy.ABOVE_MAX, RepeatPolicy.BOTH)


class Precision(Enum):
    """Resolution tiers for approximations; HIGHEST selects the exact evaluator."""

    LOW = 10
    NORMAL = 100
    HIGH = 200
    VERY_HIGH = 1000
    HIGHEST = 0

    @property
    def resolution(self) -> int:
        return self.value

    @property
    def is_exact(self) -> bool:
        return self is Precision.HIGHEST


@dataclass(frozen=True, slots=True)
class RangeCheckConfig:
    """Out-of-range policy shared by every range built from the same config."""

    on_exceed: ExceedAction = ExceedAction.SILENT


class RangeError(ValueError):
    """Raised when a range cannot be constructed or used."""


class RangeExceededError(RangeError):
    """Raised for out-of-range values when the policy is ExceedAction.FAIL."""


class BoundedRange:
    """Mutable start/end pair with normalize/denormalize and a repeat policy.

    Values outside ``[lo, hi]`` are reported according to the shared
    :class:`RangeCheckConfig`, then wrapped by whole multiples of the span on
    the sides the repeat policy allows, and clamped on the others.
    """

    __slots__ = ("_start", "_end", "repeat", "config")

    def __init__(
        self,
        start: float = 0.0,
        end: float = 1.0,
        repeat: RepeatPolicy = RepeatPolicy.BOTH,
        config: RangeCheckConfig | None = None,
    ) -> None:
        self.repeat = repeat
        self.config = config or RangeCheckConfig()
        self.set(start, end)

    def set(self, start: float, end: float) -> None:
        start, end = float(start), float(end)
        if not (math.isfinite(start) and math.isfinite(end)):
            raise RangeError(f"Range bounds must be finite, got ({start}, {end})")
        if start == end:
            raise RangeError(f"Range start and end must differ, got ({start}, {end})")
        self._start = start
        self._end = end

    @property
    def start(self) -> float:
        return self._start

    @property
    def end(self) -> float:
        return self._end

    @property
    def span(self) -> float:
        return self._end - self._start

    @property
    def lo(self) -> float:
        return min(self._start, self._end)

    @property
    def hi(self) -> float:
        return max(self._start, self._end)

    @property
    def midpoint(self) -> float:
        return self._start + self.span / 2

    def equals(self, start: float, end: float) -> bool:
        return self._start == start and self._end == end

    def contains(self, x: float) -> bool:
        return self.lo <= x <= self.hi

    def check(self, x: float) -> float:
        """Return ``x`` folded or clamped into ``[lo, hi]``."""
        lo, hi = self.lo, self.hi
        if x < lo:
            self._report(x)
            if self.repeat.wraps_below:
                width = hi - lo
                return x + math.ceil((lo - x) / width) * width
            return lo
        if x > hi:
            self._report(x)
            if self.repeat.wraps_above:
                width = hi - lo
                return x - math.ceil((x - hi) / width) * width
            return hi
        return x

    def normalize(self, x: float) -> float:
        return (self.check(x) - self._start) / self.span

    def denormalize(self, y: float) -> float:
        return self.check(self._start + y * self.span)

    def to_unit(self, values: np.ndarray) -> np.ndarray:
        """Affine map of ``values`` onto [0, 1] without applying the range policy."""
        return (np.asarray(values, dtype=np.float64) - self._start) / self.span

    def from_unit(self, values: np.ndarray) -> np.ndarray:
        """Affine map of unit ``values`` into this range without applying the range policy."""
        return self._start + np.asarray(values, dtype=np.float64) * self.span

    def copy(self) -> "BoundedRange":
        return BoundedRange(self._start, self._end, self.repeat, self.config)

    def _report(self, x: float) -> None:
        action = self.config.on_exceed
        if action is ExceedAction.WARN:
            logger.warning("Value '%s' is outside %s.", x, self)
        elif action is ExceedAction.FAIL:
            raise RangeExceededError(f"Value '{x}' is outside {self}.")

    def __repr__(self) -> str:
        return f"BoundedRange({self._start}, {self._end}, repeat={self.repeat.name})"

    def __str__(self) -> str:
        return f"range from '{self._start}' to '{self._end}'"
