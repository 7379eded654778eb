"""Normalization and splitting of definition strings.

A definition string is a set of parallel chains separated by ``&``; each
chain is a sequence of steps separated by ``>``; each step is a transform
name followed by optional numeric parameters separated by whitespace or
commas, e.g. ``"triangle 0.3 > invert > exp 3 & sin > weight 0.4"``.
"""

from __future__ import annotations

import re
from typing import List

IDENTITY_DEFINITION = "x"

_LINE_BREAKS = re.compile(r"[\t\n\r]")
_LEADING_SEPARATORS = re.compile(r"^[\s>&]+")
_TRAILING_SEPARATORS = re.compile(r"[\s>&]+$")
_STEP_RUNS = re.compile(r">(\s*>)+")
# must run after _STEP_RUNS, otherwise every "> >" would turn into "&"
_MIXED_RUNS = re.compile(r"[&>](\s*[&>])+")

_CHAIN_SEPARATOR = re.compile(r"\s*&\s*")
_STEP_SEPARATOR = re.compile(r"\s*>\s*")
_TOKEN_SEPARATOR = re.compile(r"[\s,]+")


def normalize_definition(text: str) -> str:
    """Return the canonical form of a definition string."""
    text = _LINE_BREAKS.sub(" ", text)
    text = _LEADING_SEPARATORS.sub("", text)
    text = _TRAILING_SEPARATORS.sub("", text)
    text = _STEP_RUNS.sub(">", text)
    text = _MIXED_RUNS.sub("&", text)
    text = text.lower()
    return text or IDENTITY_DEFINITION


def split_chains(normalized: str) -> List[str]:
    return _CHAIN_SEPARATOR.split(normalized)


def split_steps(chain: str) -> List[str]:
    return _STEP_SEPARATOR.split(chain)


def split_tokens(step: str) -> List[str]:
    """Split a step into its transform name and raw parameter tokens."""
    tokens = _TOKEN_SEPARATOR.split(step.strip())
    return [token for token in tokens if token] or [""]
