"""Environment-driven settings for mapping compilation."""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

from core.domain.mapping_service import MappingCompilerConfig
from core.domain.value_objects import ExceedAction, Precision, RangeCheckConfig

ON_EXCEED_VAR = "COMPLEX_MAPPING_ON_EXCEED"
PRECISION_VAR = "COMPLEX_MAPPING_PRECISION"
SEED_VAR = "COMPLEX_MAPPING_SEED"
LOG_LEVEL_VAR = "COMPLEX_MAPPING_LOG_LEVEL"


class SettingsError(ValueError):
    """Raised when an environment setting cannot be interpreted."""


def env_get(key: str, default: str | None = None) -> str | None:
    """Get environment variable or return default."""
    return os.getenv(key, default)


def _on_exceed(value: str) -> ExceedAction:
    try:
        return ExceedAction(value.strip().lower())
    except ValueError:
        raise SettingsError(f"Unknown {ON_EXCEED_VAR} value: {value}") from None


def _precision(value: str) -> Precision:
    try:
        return Precision[value.strip().upper()]
    except KeyError:
        raise SettingsError(f"Unknown {PRECISION_VAR} value: {value}") from None


def _seed(value: str | None) -> int | None:
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError:
        raise SettingsError(f"{SEED_VAR} must be an integer, got: {value}") from None


def log_level() -> int:
    name = (env_get(LOG_LEVEL_VAR, "INFO") or "INFO").strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise SettingsError(f"Unknown {LOG_LEVEL_VAR} value: {name}")
    return level


def load_settings(dotenv: bool = True) -> MappingCompilerConfig:
    """Build the compiler configuration from ``.env`` and the environment."""
    if dotenv:
        load_dotenv()
    return MappingCompilerConfig(
        default_precision=_precision(env_get(PRECISION_VAR, "high") or "high"),
        range_config=RangeCheckConfig(on_exceed=_on_exceed(env_get(ON_EXCEED_VAR, "silent") or "silent")),
        seed=_seed(env_get(SEED_VAR)),
    )
