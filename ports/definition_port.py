"""Port for external sources of definition strings."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class DefinitionSourcePort(Protocol):
    """Supplies definition strings, e.g. a generator driving random transitions."""

    def next_definition(self) -> str:
        ...
