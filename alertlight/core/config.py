"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, field_validator

from alertlight.core.types import Severity

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")


class ServerConfig(BaseModel):
    """Webhook listener configuration."""

    host: str = "0.0.0.0"
    port: int = 9000
    webhook_path: str = "/"

    @field_validator("webhook_path")
    @classmethod
    def _leading_slash(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError("webhook_path must start with '/'")
        return v


class OutputsConfig(BaseModel):
    """Indicator output backend and severity to pin mapping."""

    backend: Literal["gpio", "stub"] = "gpio"
    pin_numbering: Literal["BCM", "BOARD"] = "BCM"
    pins: dict[Severity, int] = {
        Severity.CRITICAL: 18,
        Severity.WARNING: 14,
    }

    @field_validator("pins")
    @classmethod
    def _one_pin_per_severity(cls, v: dict[Severity, int]) -> dict[Severity, int]:
        missing = [s.value for s in Severity if s not in v]
        if missing:
            raise ValueError(f"no pin configured for: {', '.join(missing)}")
        if len(set(v.values())) != len(v):
            raise ValueError("each severity needs its own pin")
        if any(pin < 0 for pin in v.values()):
            raise ValueError("pin numbers must be non-negative")
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"
    file: str | None = None


class Settings(BaseModel):
    """Root settings container."""

    server: ServerConfig = ServerConfig()
    outputs: OutputsConfig = OutputsConfig()
    logging: LoggingConfig = LoggingConfig()


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and cache globally.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    _settings = Settings(**data)
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
