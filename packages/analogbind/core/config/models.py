"""Configuration models for analogbind."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = Field(default=False, description="Emit JSON log lines instead of text")
    filename: str | None = Field(default=None, description="Log file path (stdout if unset)")


class EditorConfig(BaseModel):
    """Curve and dead-zone editing limits.

    Adding a point needs more x room than a drag keeps. Dead-zone separation
    is in percent.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    max_movable_points: int = Field(default=12, ge=0, le=14)
    drag_min_spacing: float = Field(default=0.01, gt=0.0, lt=0.5)
    add_min_spacing: float = Field(default=0.02, gt=0.0, lt=0.5)
    dead_zone_min_separation: float = Field(default=5.0, ge=0.0, le=100.0)
    mixed_epsilon: float = Field(
        default=0.001, gt=0.0, description="Tolerance when comparing values across a selection"
    )
    drag_throttle_ms: float = Field(
        default=16.0, ge=0.0, description="Minimum interval between provisional drag updates"
    )


class CurveConfig(BaseModel):
    """Response curve evaluation settings."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    lut_size: int = Field(default=256, ge=2, le=65536, description="Lookup table resolution")


class SyncConfig(BaseModel):
    """Backend synchronization settings."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    debounce_seconds: float = Field(
        default=1.0, ge=0.0, description="Quiescence window before a batch push fires"
    )


class BackendConfig(BaseModel):
    """Mapping store backend selection."""

    model_config = ConfigDict(extra="forbid")

    kind: Literal["memory", "file"] = "memory"
    path: str | None = Field(default=None, description="Store directory for the file backend")

    @model_validator(mode="after")
    def _validate_path(self) -> BackendConfig:
        """File backend needs a directory."""
        if self.kind == "file" and not self.path:
            raise ValueError("backend.path is required when backend.kind is 'file'")
        return self


class ConfigBase(BaseModel):
    """Base class for analogbind configurations.

    Subclasses must implement default_path() to specify their default location.
    """

    model_config = ConfigDict(extra="ignore")  # Forward compatibility

    @classmethod
    def default_path(cls) -> Path:
        """Return the default config file path for this config type."""
        raise NotImplementedError(f"{cls.__name__} must implement default_path()")

    @classmethod
    def load_or_default(cls, path: Path | str | None = None) -> Self:
        """Load config from path, falling back to defaults when the file is missing.

        Args:
            path: Path to config file, or None to use default

        Returns:
            Loaded config instance

        Raises:
            ValidationError: If config is invalid
        """
        from analogbind.core.config.loader import load_config

        if path is None:
            path = cls.default_path()
        if not Path(path).exists():
            return cls()
        return cls.model_validate(load_config(path))


class AppConfig(ConfigBase):
    """Application-level configuration."""

    logging: LoggingConfig = LoggingConfig()
    editor: EditorConfig = EditorConfig()
    curves: CurveConfig = CurveConfig()
    sync: SyncConfig = SyncConfig()
    backend: BackendConfig = BackendConfig()

    @classmethod
    def default_path(cls) -> Path:
        """Default path for application config."""
        return Path("analogbind.yaml")
