"""Configuration loader for the converter.

Loads ``converter.yaml`` and validates it with pydantic models that mirror
the YAML structure.  Policy values are the string values of the enums in
``svg2pdc.geometry`` and ``svg2pdc.color``, so a validated config hands the
converter real enum members.

Usage::

    from svg2pdc.configs.loader import load_config
    cfg = load_config()                          # shipped defaults
    cfg = load_config("/custom/converter.yaml")  # explicit path
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from svg2pdc.color import ColorPolicy
from svg2pdc.geometry import GridPolicy, Precision
from svg2pdc.utils.fs import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "converter.yaml"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Raised when configuration validation fails."""

    pass


# ---------------------------------------------------------------------------
# Models -- mirror the YAML structure
# ---------------------------------------------------------------------------


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class ConversionConfig(_Section):
    """Quantization policies."""

    precision: Precision = Field(Precision.NORMAL, description="Snapping grid")
    color_policy: ColorPolicy = Field(ColorPolicy.NEAREST, description="Channel reduction")
    grid_policy: GridPolicy = Field(
        GridPolicy.REQUIRE_EXACT, description="Off-grid coordinate handling"
    )
    floor_path_points: bool = Field(
        True, description="Floor path vertices before quantization (legacy output)"
    )


class RotateConfig(_Section):
    """Size-based log rotation."""

    max_bytes: int = Field(1_000_000, gt=0)
    backup_count: int = Field(3, ge=0)


class LoggingConfig(_Section):
    """Arguments for ``setup_logging``."""

    level: str = Field("INFO", description="Root log level")
    json_format: bool = Field(False, alias="json", description="JSON log lines")
    color: bool = True
    file: Optional[str] = None
    rotate: Optional[RotateConfig] = None

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v = v.upper()
        if v not in _LOG_LEVELS:
            raise ValueError(f"Log level must be one of {list(_LOG_LEVELS)}, got '{v}'")
        return v

    def setup_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``setup_logging``."""
        return {
            "log_level": self.level,
            "log_file": self.file,
            "json": self.json_format,
            "color": self.color,
            "rotate": self.rotate.model_dump() if self.rotate else None,
        }


class OutputConfig(_Section):
    """Output file handling."""

    extension: str = Field(".pdc", description="Extension of converted files")
    atomic: bool = Field(True, description="Write via temp file + rename")

    @field_validator("extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        if not v.startswith(".") or len(v) < 2:
            raise ValueError(f"Extension must start with '.', got '{v}'")
        return v


class ConverterConfig(_Section):
    """Top-level ``converter.yaml``."""

    conversion: ConversionConfig = Field(default_factory=ConversionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def _format_validation_error(exc: ValidationError) -> str:
    lines = []
    for err in exc.errors():
        key = ".".join(str(part) for part in err["loc"]) or "<root>"
        lines.append(f"{key}: {err['msg']}")
    return "; ".join(lines)


def load_config(path: Union[str, Path, None] = None) -> ConverterConfig:
    """Load and validate the converter configuration.

    Parameters
    ----------
    path : str | Path | None
        Path to a ``converter.yaml``.  ``None`` loads the default shipped
        alongside this module.

    Returns
    -------
    ConverterConfig
        Validated, frozen configuration.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    ConfigError
        If the file is empty, is not valid YAML, or fails validation.  The
        message names the offending key.
    """
    path = DEFAULT_CONFIG_PATH if path is None else Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.debug("Loading configuration from %s", path)

    try:
        data = load_yaml(path)
    except yaml.YAMLError as exc:
        raise ConfigError(str(exc)) from exc
    if data is None:
        raise ConfigError(f"Empty configuration file: {path}")
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration root must be a mapping: {path}")

    try:
        return ConverterConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(
            f"Invalid configuration {path}: {_format_validation_error(exc)}"
        ) from exc
