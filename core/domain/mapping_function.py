"""Range-aware mapping functions built from compiled definition strings."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterator, Optional

import numpy as np
import pandas as pd

from core.domain.approximation import Approximation
from core.domain.transformations import CompiledExpression
from core.domain.value_objects import (
    BoundedRange,
    Precision,
    RangeCheckConfig,
    RepeatPolicy,
)

if TYPE_CHECKING:
    from core.domain.mapping_service import MappingCompiler

logger = logging.getLogger(__name__)


class EvaluationStrategy(Enum):
    EXACT = "exact"
    APPROXIMATE = "approximate"


@dataclass(frozen=True)
class DeviationReport:
    """Average and maximum distance between a map and its target."""

    average: float
    maximum: float
    samples: int
    note: Optional[str] = None

    @classmethod
    def unavailable(cls, samples: int) -> "DeviationReport":
        return cls(
            average=math.nan,
            maximum=math.nan,
            samples=samples,
            note="A target map is necessary to calculate the deviation.",
        )

    @property
    def available(self) -> bool:
        return self.note is None

    def __iter__(self) -> Iterator[float]:
        yield self.average
        yield self.maximum

    def __str__(self) -> str:
        if not self.available:
            return self.note or ""
        return f"average deviation = {self.average}; max deviation = {self.maximum}"


@dataclass(frozen=True)
class PerformanceReport:
    """Wall-clock seconds spent on repeated evaluations."""

    iterations: int
    elapsed: float
    target_elapsed: Optional[float] = None


class MappingFunction:
    """Maps values from an input range to an output range.

    Holds exactly one evaluator: the compiled expression itself (exact) or an
    :class:`Approximation` of it. An optional target map, evaluated over the
    same ranges, allows blending between two curves with ``map(x, ratio)``.
    """

    def __init__(
        self,
        expression: CompiledExpression,
        precision: Precision,
        compiler: "MappingCompiler",
        range_config: RangeCheckConfig | None = None,
    ) -> None:
        config = range_config or RangeCheckConfig()
        self.expression = expression
        self.precision = precision
        self.input = BoundedRange(0, 1, RepeatPolicy.BOTH, config)
        self.output = BoundedRange(0, 1, RepeatPolicy.NONE, config)
        self.blend_range = BoundedRange(0, 1, RepeatPolicy.NONE, config)
        self.target_map: MappingFunction | None = None
        self._compiler = compiler
        self._approximation: Approximation | None = None
        if not precision.is_exact:
            self._approximation = Approximation(expression, precision.resolution, self.output)

    @property
    def strategy(self) -> EvaluationStrategy:
        if self._approximation is None:
            return EvaluationStrategy.EXACT
        return EvaluationStrategy.APPROXIMATE

    @property
    def approximation(self) -> Approximation | None:
        return self._approximation

    @property
    def resolution(self) -> int | None:
        return None if self._approximation is None else self._approximation.resolution

    @property
    def definition(self) -> str:
        return self.expression.definition

    @property
    def input_start(self) -> float:
        return self.input.start

    @property
    def input_end(self) -> float:
        return self.input.end

    @property
    def output_start(self) -> float:
        return self.output.start

    @property
    def output_end(self) -> float:
        return self.output.end

    def map(self, x: float, ratio: float | None = None) -> float:
        """Return the mapped value of ``x``.

        With ``ratio`` the result is blended towards the target map: the
        ratio is normalized through ``blend_range``, so its start yields this
        map's value and its end the target's.
        """
        y = self._map(x)
        if ratio is None:
            return y
        if self.target_map is None:
            logger.warning("No target map defined, ratio %s is ignored.", ratio)
            return y
        return y + self.blend_range.normalize(ratio) * (self.target_map.map(x) - y)

    def _map(self, x: float) -> float:
        nx = self.input.normalize(x)
        if self._approximation is not None:
            return self.output.check(self._approximation.evaluate(nx))
        return self.output.denormalize(self.expression.evaluate(nx))

    def set_range(
        self,
        input_start: float,
        input_end: float,
        output_start: float,
        output_end: float,
        input_repeat: RepeatPolicy | None = None,
    ) -> "MappingFunction":
        """Set input and output ranges for this map and its target."""
        new_input = BoundedRange(
            input_start, input_end, input_repeat or self.input.repeat, self.input.config
        )
        new_output = BoundedRange(output_start, output_end, self.output.repeat, self.output.config)
        if self.target_map is not None:
            self.target_map.set_range(input_start, input_end, output_start, output_end, input_repeat)
        if self._approximation is not None:
            self._approximation.rescale(self.output, new_output)
        self.input = new_input
        self.output = new_output
        return self

    def set_blend_range(self, start: float, end: float) -> "MappingFunction":
        self.blend_range = BoundedRange(start, end, self.blend_range.repeat, self.blend_range.config)
        return self

    def set_target_map(
        self, definition: str, precision: Precision | None = None
    ) -> "MappingFunction":
        """Compile ``definition`` as the blend target, sharing this map's ranges.

        Returns this map, not the target.
        """
        target = self._compiler.compile(definition, precision)
        target.set_range(
            self.input.start,
            self.input.end,
            self.output.start,
            self.output.end,
            self.input.repeat,
        )
        self.target_map = target
        return self

    def tabulate(self, samples: int = 100) -> pd.DataFrame:
        """Evaluate ``samples + 1`` evenly spaced points across the input range."""
        xs = np.linspace(self.input.start, self.input.end, samples + 1)
        frame = pd.DataFrame({"x": xs, "y": [self.map(float(x)) for x in xs]})
        if self.target_map is not None:
            frame["target"] = [self.target_map.map(float(x)) for x in xs]
        return frame

    def get_deviation(self, samples: int = 1000) -> DeviationReport:
        """Compare this map with its target, relative to the output span."""
        if self.target_map is None:
            report = DeviationReport.unavailable(samples)
            logger.info(report.note)
            return report
        frame = self.tabulate(samples)
        difference = (frame["target"] - frame["y"]).abs() / abs(self.output.span)
        report = DeviationReport(
            average=float(difference.mean()),
            maximum=float(difference.max()),
            samples=samples,
        )
        logger.info("Deviation over %d samples: %s", samples, report)
        return report

    def get_performance(self, iterations: int = 10000) -> PerformanceReport:
        elapsed = self._time(self, iterations)
        logger.info("Elapsed time map %d: %.6f s", iterations, elapsed)
        target_elapsed = None
        if self.target_map is not None:
            target_elapsed = self._time(self.target_map, iterations)
            logger.info("Elapsed time target map %d: %.6f s", iterations, target_elapsed)
        return PerformanceReport(iterations, elapsed, target_elapsed)

    def _time(self, mapping: "MappingFunction", iterations: int) -> float:
        value = self.input.midpoint
        start = time.perf_counter()
        for _ in range(iterations + 1):
            mapping.map(value)
        return time.perf_counter() - start

    def __repr__(self) -> str:
        return (
            f"MappingFunction('{self.definition}', strategy={self.strategy.value}, "
            f"input={self.input!r}, output={self.output!r})"
        )
