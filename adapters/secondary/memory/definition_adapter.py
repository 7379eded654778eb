"""In-memory definition sources."""

from __future__ import annotations

from typing import FrozenSet, Iterable, Tuple

import numpy as np

from core.domain.transforms import REGISTRY
from ports.definition_port import DefinitionSourcePort

DEFAULT_EXCLUDED: FrozenSet[str] = frozenset({"x", "constant", "weight", "random", "squarerandom"})


class RandomDefinitionAdapter(DefinitionSourcePort):
    """Adapter producing random definitions from the transform registry.

    Each definition has between one and ``max_steps`` steps using default
    parameters; a separator is ``&`` with probability ``1 / chain_odds`` and
    ``>`` otherwise.
    """

    def __init__(
        self,
        max_steps: int = 5,
        chain_odds: int = 4,
        exclude: Iterable[str] = DEFAULT_EXCLUDED,
        seed: int | None = None,
    ) -> None:
        if max_steps < 1:
            raise ValueError("max_steps must be at least 1")
        if chain_odds < 1:
            raise ValueError("chain_odds must be at least 1")
        excluded = frozenset(exclude)
        self._names: Tuple[str, ...] = tuple(name for name in REGISTRY if name not in excluded)
        if not self._names:
            raise ValueError("Every transform is excluded")
        self.max_steps = max_steps
        self.chain_odds = chain_odds
        self._rng = np.random.default_rng(seed)

    @property
    def names(self) -> Tuple[str, ...]:
        return self._names

    def next_definition(self) -> str:
        count = int(self._rng.integers(1, self.max_steps + 1))
        parts = [str(self._rng.choice(self._names))]
        for _ in range(count - 1):
            parts.append(" & " if self._rng.random() * self.chain_odds < 1 else " > ")
            parts.append(str(self._rng.choice(self._names)))
        return "".join(parts)


class CyclingDefinitionAdapter(DefinitionSourcePort):
    """Adapter replaying a fixed list of definitions in order, forever."""

    def __init__(self, definitions: Iterable[str]) -> None:
        self._definitions = tuple(definitions)
        if not self._definitions:
            raise ValueError("At least one definition is required")
        self._position = 0

    def next_definition(self) -> str:
        definition = self._definitions[self._position]
        self._position = (self._position + 1) % len(self._definitions)
        return definition
