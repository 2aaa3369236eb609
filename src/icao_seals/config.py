"""
Configuration for the seal and barcode codecs.

Settings are read from an optional YAML file and then overridden by
environment variables prefixed with ``ICAO_SEALS_``::

    ICAO_SEALS_LOG_LEVEL=DEBUG
    ICAO_SEALS_DEFLATE_LEVEL=6
    ICAO_SEALS_ACCEPT_LEGACY_IDENTIFIER=false
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from .types import ConfigurationError

ENV_PREFIX = "ICAO_SEALS_"
CONFIG_PATH_ENV = f"{ENV_PREFIX}CONFIG"

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET", "OFF")


class SealSettings(BaseSettings):
    """Runtime settings for seal processing."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="text", description="Log format (json, text)")
    deflate_level: int = Field(
        default=9, ge=0, le=9, description="zlib level used for zipped barcodes"
    )
    accept_legacy_identifier: bool = Field(
        default=True, description="Accept the legacy NDB1 barcode identifier on decode"
    )
    schema_catalog_path: Path | None = Field(
        default=None, description="YAML schema catalog replacing the bundled one"
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment wins over init values, which carry the YAML file
        return env_settings, init_settings

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        level = v.upper()
        if level not in LOG_LEVELS:
            msg = f"log_level must be one of {', '.join(LOG_LEVELS)}"
            raise ValueError(msg)
        return level

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        fmt = v.lower()
        if fmt not in ("json", "text"):
            msg = "log_format must be 'json' or 'text'"
            raise ValueError(msg)
        return fmt


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        msg = f"Failed to load configuration from {path}: {e}"
        raise ConfigurationError(msg) from e
    if loaded is not None and not isinstance(loaded, dict):
        msg = f"Configuration file {path} must contain a mapping"
        raise ConfigurationError(msg)
    return loaded or {}


def load_settings(path: str | Path | None = None) -> SealSettings:
    """
    Load settings from a YAML file and ``ICAO_SEALS_*`` environment variables.

    Args:
        path: YAML file; defaults to ``$ICAO_SEALS_CONFIG`` when set

    Returns:
        Validated settings

    Raises:
        ConfigurationError: If the file cannot be read or a value is invalid
    """
    if path is None:
        path = os.environ.get(CONFIG_PATH_ENV)
    data = _read_yaml(Path(path)) if path is not None else {}

    try:
        return SealSettings(**data)
    except ValidationError as e:
        msg = f"Invalid configuration: {e}"
        raise ConfigurationError(msg) from e


@lru_cache(maxsize=1)
def get_settings() -> SealSettings:
    """Settings loaded once per process; call ``get_settings.cache_clear()`` to reload."""
    return load_settings()
