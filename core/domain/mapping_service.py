"""Compilation of definition strings into mapping functions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from core.domain.mapping_function import MappingFunction
from core.domain.transformations import CompiledExpression
from core.domain.value_objects import Precision, RangeCheckConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MappingCompilerConfig:
    """Configuration for mapping compilation."""

    default_precision: Precision = Precision.HIGH
    range_config: RangeCheckConfig = field(default_factory=RangeCheckConfig)
    seed: int | None = None


def select_precision(
    expression: CompiledExpression,
    requested: Precision | None,
    fallback: Precision = Precision.HIGH,
) -> Precision:
    """Pick the evaluator for ``expression``.

    An explicit request always wins. Otherwise short, cheap expressions are
    evaluated directly and everything else is approximated at ``fallback``.
    """
    if requested is not None:
        return requested
    if expression.is_fast:
        return Precision.HIGHEST
    return fallback


class MappingCompiler:
    """Service that turns definition strings into mapping functions."""

    def __init__(self, config: MappingCompilerConfig | None = None) -> None:
        self.config = config or MappingCompilerConfig()
        self._rng = np.random.default_rng(self.config.seed)

    def parse(self, definition: str) -> CompiledExpression:
        return CompiledExpression.parse(definition, self._rng)

    def compile(self, definition: str, precision: Precision | None = None) -> MappingFunction:
        """Compile ``definition``; ``precision`` forces a tier instead of the cost estimate."""
        expression = self.parse(definition)
        chosen = select_precision(expression, precision, self.config.default_precision)
        logger.debug(
            "Compiled '%s' (%d steps, %d cheap) with precision %s",
            expression.definition,
            expression.step_count,
            expression.cheap_step_count,
            chosen.name,
        )
        return MappingFunction(expression, chosen, self, self.config.range_config)


_default_compiler: MappingCompiler | None = None


def default_compiler() -> MappingCompiler:
    global _default_compiler
    if _default_compiler is None:
        _default_compiler = MappingCompiler()
    return _default_compiler


def compile_mapping(definition: str, precision: Precision | None = None) -> MappingFunction:
    """Compile ``definition`` with the default compiler."""
    return default_compiler().compile(definition, precision)
