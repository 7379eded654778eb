"""Piecewise-linear lookup table approximating a compiled expression."""

from __future__ import annotations

import numpy as np

from core.domain.transformations import CompiledExpression
from core.domain.value_objects import BoundedRange


class Approximation:
    """Samples of an expression at ``resolution + 1`` evenly spaced points.

    The table carries one extra copy of the last sample so that a query at
    ``x == 1`` can interpolate without a boundary branch. Samples are kept in
    the units of the owning map's output range, unchecked, so the range
    policy applies when a value is looked up; :meth:`rescale` moves them
    between output ranges without resampling.
    """

    def __init__(
        self,
        expression: CompiledExpression,
        resolution: int,
        output: BoundedRange | None = None,
    ) -> None:
        if resolution < 1:
            raise ValueError(f"Approximation resolution must be positive, got {resolution}")
        self.resolution = resolution
        xs = np.arange(resolution + 1, dtype=np.float64) / resolution
        samples = np.empty(resolution + 2, dtype=np.float64)
        samples[: resolution + 1] = [expression.evaluate(float(x)) for x in xs]
        samples[-1] = samples[-2]
        self.samples = output.from_unit(samples) if output is not None else samples

    def evaluate(self, x: float) -> float:
        section = x * self.resolution
        i = min(max(int(section), 0), self.resolution)
        return float(self.samples[i] + (section - i) * (self.samples[i + 1] - self.samples[i]))

    def rescale(self, old: BoundedRange, new: BoundedRange) -> None:
        """Move the stored samples from ``old`` output units into ``new`` ones."""
        self.samples = new.from_unit(old.to_unit(self.samples))

    @property
    def minimum(self) -> float:
        return float(self.samples.min())

    @property
    def maximum(self) -> float:
        return float(self.samples.max())

    def __len__(self) -> int:
        return len(self.samples)

    def __repr__(self) -> str:
        return (
            f"Approximation(resolution={self.resolution}, "
            f"min={self.minimum:.4g}, max={self.maximum:.4g})"
        )
