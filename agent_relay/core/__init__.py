"""Cross-cutting configuration and logging helpers."""

from .config import DecisionApiConfig, LoggingConfig, Settings, get_settings
from .logging_config import get_logger, setup_logging

__all__ = [
    "DecisionApiConfig",
    "LoggingConfig",
    "Settings",
    "get_settings",
    "get_logger",
    "setup_logging",
]
