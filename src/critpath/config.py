"""Unified configuration loader.

A single configuration file (critpath_config.yaml) holds the scheduler
settings and report/export options.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from . import context
from .scheduler import SchedulingConfig

DEFAULT_CONFIG_FILENAME = "critpath_config.yaml"

VALID_DATETIME_FORMATS = {"date", "datetime"}


class OutputConfig(BaseModel):
    """Configuration for reports and exports."""

    datetime_format: str = "date"  # "date" (YYYY-MM-DD) or "datetime" (ISO 8601)
    slack_precision: int = Field(default=2, ge=0)

    @field_validator("datetime_format")
    @classmethod
    def check_datetime_format(cls, v: str) -> str:
        """Validate the datetime format name."""
        if v not in VALID_DATETIME_FORMATS:
            raise ValueError(
                f"Invalid output.datetime_format: '{v}'. "
                f"Valid values: {', '.join(sorted(VALID_DATETIME_FORMATS))}"
            )
        return v


class UnifiedConfig(BaseModel):
    """Unified configuration containing scheduler and output settings."""

    scheduler: SchedulingConfig = Field(default_factory=SchedulingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


def load_unified_config(config_path: Path | str) -> UnifiedConfig:
    """Load unified configuration from a YAML file.

    Args:
        config_path: Path to critpath_config.yaml

    Returns:
        UnifiedConfig with defaults for any missing section

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open(encoding="utf-8") as f:
        data: Any = yaml.safe_load(f)

    if not data:
        raise ValueError("Empty configuration file")
    if not isinstance(data, dict):
        raise ValueError("Config must contain a mapping at the root level")

    unknown = set(data) - set(UnifiedConfig.model_fields)  # type: ignore[arg-type]
    if unknown:
        raise ValueError(f"Unknown config section(s): {', '.join(sorted(unknown))}")

    return UnifiedConfig.model_validate(data)


def discover_config(
    project_path: Path | None = None,
    config_path: Path | None = None,
) -> UnifiedConfig | None:
    """Find and load the unified config.

    Search order:
    1. Explicit config_path argument
    2. Global context (set via CLI --config)
    3. Project file directory / critpath_config.yaml
    4. Current directory / critpath_config.yaml

    An explicitly given path must exist; the default locations are optional.
    """
    if config_path:
        return load_unified_config(config_path)
    ctx_config = context.get_config_path()
    if ctx_config:
        return load_unified_config(ctx_config)

    candidates: list[Path] = []
    if project_path:
        candidates.append(Path(project_path).parent / DEFAULT_CONFIG_FILENAME)
    candidates.append(Path(DEFAULT_CONFIG_FILENAME))

    for candidate in candidates:
        if candidate.exists():
            return load_unified_config(candidate)
    return None
