"""Mapping port definitions for hexagonal architecture."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Tuple, runtime_checkable

from core.domain.mapping_function import MappingFunction
from core.domain.mapping_service import MappingCompiler, MappingCompilerConfig
from core.domain.value_objects import Precision, RepeatPolicy


@dataclass(frozen=True)
class MappingRequest:
    """Payload describing a mapping function to build."""

    definition: str
    precision: Precision | None = None
    input_range: Tuple[float, float] = (0.0, 1.0)
    output_range: Tuple[float, float] = (0.0, 1.0)
    input_repeat: RepeatPolicy = RepeatPolicy.BOTH
    target_definition: str | None = None
    target_precision: Precision | None = None


@runtime_checkable
class MappingPort(Protocol):
    """Port for acquiring ready-to-use mapping functions."""

    def build(self, request: MappingRequest) -> MappingFunction:
        ...


class InMemoryMappingAdapter(MappingPort):
    """Adapter that compiles mapping functions in-process."""

    def __init__(self, config: MappingCompilerConfig | None = None) -> None:
        self._compiler = MappingCompiler(config=config)

    @property
    def compiler(self) -> MappingCompiler:
        return self._compiler

    def build(self, request: MappingRequest) -> MappingFunction:
        mapping = self._compiler.compile(request.definition, request.precision)
        mapping.set_range(
            *request.input_range,
            *request.output_range,
            input_repeat=request.input_repeat,
        )
        if request.target_definition is not None:
            mapping.set_target_map(request.target_definition, request.target_precision)
        return mapping
