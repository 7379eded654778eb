"""Registry of the named unary transforms a step can use."""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping, Tuple

import numpy as np

Params = Tuple[float, ...]
Calculation = Callable[[float, Params], float]
Resolution = Callable[[Params, np.random.Generator], Params]

MAX_BREAK_POINTS = 10000


class ExpressionError(ValueError):
    """Raised when a definition string cannot be compiled."""


class ParameterValueError(ExpressionError):
    """Raised when a transform rejects one of its parameter values."""


class UnknownTransformError(ExpressionError):
    """Raised when a step names a transform that does not exist."""


@dataclass(frozen=True)
class Transform:
    """A registry entry: calculation rule, arity, defaults and cost hint."""

    name: str
    parameter_count: int
    defaults: Params
    is_cheap: bool
    calculate: Calculation
    resolve: Resolution

    def __post_init__(self) -> None:
        if len(self.defaults) != self.parameter_count:
            raise ValueError(
                f"Transform '{self.name}' declares {self.parameter_count} "
                f"parameters but {len(self.defaults)} defaults"
            )

    def reject(self, value: float) -> None:
        raise ParameterValueError(f"Wrong parameter '{value}' for step '{self.name}'.")


def _keep(params: Params, rng: np.random.Generator) -> Params:
    return params


def _nonzero(name: str) -> Resolution:
    def resolve(params: Params, rng: np.random.Generator) -> Params:
        if params[0] == 0:
            REGISTRY[name].reject(params[0])
        return params

    return resolve


def _open_unit(name: str) -> Resolution:
    def resolve(params: Params, rng: np.random.Generator) -> Params:
        if not 0 < params[0] < 1:
            REGISTRY[name].reject(params[0])
        return params

    return resolve


# simple


def _identity(x: float, p: Params) -> float:
    return x


def _invert(x: float, p: Params) -> float:
    return 1 - x


def _constant(x: float, p: Params) -> float:
    return p[0]


def _narrow(x: float, p: Params) -> float:
    if x < p[0]:
        return 0.0
    if x > p[1]:
        return 1.0
    return (x - p[0]) / (p[1] - p[0])


def _resolve_narrow(params: Params, rng: np.random.Generator) -> Params:
    if params[0] == params[1]:
        REGISTRY["narrow"].reject(params[1])
    return params


# exponential


def _exp(x: float, p: Params) -> float:
    e = p[0]
    if e < 0:
        x = 1 - x
    if e != 1:
        x = abs(x) ** abs(e)
    if e < 0:
        x = 1 - x
    return x


def _outward(x: float, p: Params) -> float:
    # work on [-1, 1] so the curve bends away from the center
    x = x * 2 - 1
    y = _exp(abs(x), p)
    if x < 0:
        y = -y
    return (y + 1) / 2


def _resolve_inward(params: Params, rng: np.random.Generator) -> Params:
    if params[0] == 0:
        REGISTRY["inward"].reject(params[0])
    return (-params[0],) + params[1:]


# up-down


def _peak(x: float, p: Params) -> float:
    if p[0] < 0.5:
        return 1 - abs(x - p[0]) / (1 - p[0])
    return 1 - abs(p[0] - x) / p[0]


def _triangle(x: float, p: Params) -> float:
    if x < p[0]:
        return x / p[0]
    return (1 - x) / (1 - p[0])


def _trapez(x: float, p: Params) -> float:
    if x < p[0]:
        return x / p[0] if p[0] != 0 else 0.0
    if x > p[1]:
        return (1 - x) / (1 - p[1]) if p[1] != 1 else 0.0
    return 1.0


# trigonometric


def _sin(x: float, p: Params) -> float:
    return math.sin(math.pi * x)


def _fullsin(x: float, p: Params) -> float:
    return 0.5 + math.sin(2 * math.pi * x) / 2


def _cos(x: float, p: Params) -> float:
    return 0.5 + math.cos(math.pi * x) / 2


def _fullcos(x: float, p: Params) -> float:
    return 0.5 + math.cos(2 * math.pi * x) / 2


# random


def _unit(x: float) -> float:
    return min(max(x, 0.0), 1.0)


def _random(x: float, p: Params) -> float:
    section = _unit(x) * (len(p) - 2)
    i = int(section)
    return p[i] + (section - i) * (p[i + 1] - p[i])


def _break_count(name: str, value: float) -> int:
    if not (math.isfinite(value) and 1 <= value <= MAX_BREAK_POINTS):
        REGISTRY[name].reject(value)
    return int(value)


def _resolve_random(params: Params, rng: np.random.Generator) -> Params:
    count = _break_count("random", params[0])
    return tuple(float(v) for v in rng.random(count + 2))


def _squarerandom(x: float, p: Params) -> float:
    return p[int(_unit(x) * (len(p) - 1))]


def _resolve_squarerandom(params: Params, rng: np.random.Generator) -> Params:
    count = _break_count("squarerandom", params[0])
    values = [float(v) for v in rng.random(count)]
    return tuple(values + values[-1:])


# modifiers


def _repeat(x: float, p: Params) -> float:
    return (x * p[0]) % 1


def _resolve_repeat(params: Params, rng: np.random.Generator) -> Params:
    if params[0] == 1:
        REGISTRY["repeat"].reject(params[0])
    return params


def _mirror(x: float, p: Params) -> float:
    x = _repeat(x, p)
    if x < 0.5:
        return 2 * x
    return (1 - x) * 2


def _weight(x: float, p: Params) -> float:
    return x * p[0]


def _entries(*transforms: Transform) -> Mapping[str, Transform]:
    return MappingProxyType({t.name: t for t in transforms})


REGISTRY: Mapping[str, Transform] = _entries(
    Transform("x", 0, (), True, _identity, _keep),
    Transform("invert", 0, (), True, _invert, _keep),
    Transform("constant", 1, (0.5,), True, _constant, _keep),
    Transform("narrow", 2, (0.2, 0.8), True, _narrow, _resolve_narrow),
    Transform("exp", 1, (2.0,), False, _exp, _nonzero("exp")),
    Transform("outward", 1, (2.0,), False, _outward, _nonzero("outward")),
    Transform("inward", 1, (2.0,), False, _outward, _resolve_inward),
    Transform("peak", 1, (0.8,), True, _peak, _open_unit("peak")),
    Transform("triangle", 1, (0.5,), True, _triangle, _open_unit("triangle")),
    Transform("trapez", 2, (0.3, 0.7), True, _trapez, _keep),
    Transform("sin", 0, (), False, _sin, _keep),
    Transform("fullsin", 0, (), False, _fullsin, _keep),
    Transform("cos", 0, (), False, _cos, _keep),
    Transform("fullcos", 0, (), False, _fullcos, _keep),
    Transform("random", 1, (6.0,), True, _random, _resolve_random),
    Transform("squarerandom", 1, (6.0,), True, _squarerandom, _resolve_squarerandom),
    Transform("repeat", 1, (2.0,), True, _repeat, _resolve_repeat),
    Transform("mirror", 1, (1.0,), True, _mirror, _keep),
    Transform("weight", 1, (1.0,), True, _weight, _keep),
)

WEIGHT = REGISTRY["weight"]


def get_transform(name: str) -> Transform:
    """Return the transform registered under ``name``."""
    try:
        return REGISTRY[name]
    except KeyError:
        raise UnknownTransformError(f"'{name}' is not a valid operation for a map.") from None
