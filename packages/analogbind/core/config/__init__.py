"""Configuration management for analogbind."""

from analogbind.core.config.loader import (
    configure_logging,
    load_app_config,
    load_config,
)
from analogbind.core.config.models import (
    AppConfig,
    BackendConfig,
    CurveConfig,
    EditorConfig,
    LoggingConfig,
    SyncConfig,
)

__all__ = [
    # Loaders
    "load_config",
    "load_app_config",
    "configure_logging",
    # Models
    "AppConfig",
    "BackendConfig",
    "CurveConfig",
    "EditorConfig",
    "LoggingConfig",
    "SyncConfig",
]
