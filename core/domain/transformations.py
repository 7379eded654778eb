"""Domain models for parsed steps, serial chains and compiled expressions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Tuple

import numpy as np

from core.domain.grammar import normalize_definition, split_chains, split_steps, split_tokens
from core.domain.transforms import (
    WEIGHT,
    ExpressionError,
    Params,
    Transform,
    get_transform,
)

logger = logging.getLogger(__name__)


class ParameterParseError(ExpressionError):
    """Raised when a step parameter is not a number."""


class WeightPositionError(ExpressionError):
    """Raised when a weight step is not the last step of its chain."""


def _format_number(value: float) -> str:
    return repr(float(value))


@dataclass(frozen=True)
class Step:
    """A single transform with its parameters.

    ``arguments`` holds the values as written (defaults filled in);
    ``parameters`` holds them after the transform's resolution rule, which is
    what evaluation uses.
    """

    transform: Transform
    arguments: Params
    parameters: Params

    @classmethod
    def parse(cls, text: str, rng: np.random.Generator | None = None) -> "Step":
        name, *raw = split_tokens(text)
        transform = get_transform(name)
        if len(raw) > transform.parameter_count:
            logger.warning(
                "Too many parameters: step '%s' needs %d parameter(s), but %d are given.",
                transform.name,
                transform.parameter_count,
                len(raw),
            )
        arguments = tuple(
            _parse_parameter(raw[i], transform) if i < len(raw) else transform.defaults[i]
            for i in range(transform.parameter_count)
        )
        parameters = transform.resolve(arguments, rng or np.random.default_rng())
        return cls(transform, arguments, parameters)

    @property
    def name(self) -> str:
        return self.transform.name

    @property
    def is_cheap(self) -> bool:
        return self.transform.is_cheap

    def evaluate(self, x: float) -> float:
        return self.transform.calculate(x, self.parameters)

    def __str__(self) -> str:
        if not self.arguments:
            return self.name
        return f"{self.name} " + ", ".join(_format_number(v) for v in self.arguments)


def _parse_parameter(token: str, transform: Transform) -> float:
    try:
        return float(token)
    except ValueError:
        raise ParameterParseError(
            f"Parameter '{token}' for step '{transform.name}' could not be converted into a float value."
        ) from None


@dataclass(frozen=True)
class Chain:
    """Steps applied one after another; the output of each feeds the next."""

    steps: Tuple[Step, ...]
    weight: float = field(init=False)

    def __post_init__(self) -> None:
        if not self.steps:
            raise ExpressionError("A chain needs at least one step")
        weight = 1.0
        for index, step in enumerate(self.steps):
            if step.transform is not WEIGHT:
                continue
            if index != len(self.steps) - 1:
                raise WeightPositionError(f"Weight must be the last step of a chain: '{self}'")
            weight = step.parameters[0]
        object.__setattr__(self, "weight", weight)

    @classmethod
    def parse(cls, text: str, rng: np.random.Generator | None = None) -> "Chain":
        return cls(tuple(Step.parse(part, rng) for part in split_steps(text)))

    def evaluate(self, x: float) -> float:
        # the weight step scales here as well as weighting the chain in the average
        for step in self.steps:
            x = step.evaluate(x)
        return x

    def __str__(self) -> str:
        return " > ".join(str(step) for step in self.steps)


@dataclass(frozen=True)
class CompiledExpression:
    """Weighted average of parallel chains; the exact evaluator on [0, 1]."""

    chains: Tuple[Chain, ...]
    total_weight: float = field(init=False)

    def __post_init__(self) -> None:
        if not self.chains:
            raise ExpressionError("An expression needs at least one chain")
        total = sum(chain.weight for chain in self.chains)
        if total == 0:
            raise ExpressionError(f"Chain weights of '{self}' sum to zero")
        object.__setattr__(self, "total_weight", total)

    @classmethod
    def parse(cls, text: str, rng: np.random.Generator | None = None) -> "CompiledExpression":
        """Normalize ``text`` and build every chain and step it describes."""
        rng = rng or np.random.default_rng()
        normalized = normalize_definition(text)
        return cls(tuple(Chain.parse(part, rng) for part in split_chains(normalized)))

    @property
    def step_count(self) -> int:
        return sum(len(chain.steps) for chain in self.chains)

    @property
    def cheap_step_count(self) -> int:
        return sum(1 for chain in self.chains for step in chain.steps if step.is_cheap)

    @property
    def is_fast(self) -> bool:
        """Whether direct evaluation beats building an approximation."""
        steps = self.step_count
        return steps <= 3 and steps == self.cheap_step_count

    @property
    def definition(self) -> str:
        return str(self)

    def evaluate(self, x: float) -> float:
        return sum(chain.evaluate(x) for chain in self.chains) / self.total_weight

    def __str__(self) -> str:
        return " & ".join(str(chain) for chain in self.chains)
