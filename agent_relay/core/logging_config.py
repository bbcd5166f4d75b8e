"""
Logging Configuration Module.

Centralized logging setup for applications built on agent-relay. Importing the
package never touches the logging tree; the process entry point calls
``setup_logging`` once, optionally with overrides.

Two channels exist side by side:
- Module loggers (``logging.getLogger(__name__)``) for diagnostics such as
  request routes, ids and unhandled action types.
- The agent log sink (``Agent.set_logger``) for human-facing progress. The
  default sink writes through the ``agent_relay.agent_core.agent`` logger, so
  it is formatted by the handlers installed here.

Values come from ``Settings.logging`` (``AGENT_RELAY_LOG_*`` variables).
"""

import logging
from pathlib import Path
from typing import Dict, Optional

from agent_relay.core.config import LoggingConfig, get_settings

LOG_FILE_NAME = "agent_relay.log"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

SIMPLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"

DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s"

JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"module": "%(filename)s", "function": "%(funcName)s", "line": %(lineno)d, '
    '"message": "%(message)s"}'
)

LOG_FORMATS: Dict[str, str] = {
    "simple": SIMPLE_FORMAT,
    "detailed": DETAILED_FORMAT,
    "json": JSON_FORMAT,
}

# Module-specific log levels
MODULE_LOG_LEVELS = {
    "agent_relay.agent_core": "DEBUG",
    "agent_relay.agent_core.agent": "DEBUG",
    "agent_relay.agent_core.worker": "DEBUG",
    "agent_relay.agent_core.chat": "DEBUG",
    "agent_relay.decision_api": "INFO",
    # Third-party libraries (reduce noise)
    "httpx": "WARNING",
    "httpcore": "WARNING",
    "asyncio": "WARNING",
}


def build_formatter(log_format: str) -> logging.Formatter:
    """Return the formatter for ``log_format``; unknown names fall back to ``detailed``."""
    return logging.Formatter(LOG_FORMATS.get(log_format, DETAILED_FORMAT), datefmt=DATE_FORMAT)


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    enable_file: bool = True,
    config: Optional[LoggingConfig] = None,
) -> None:
    """
    Configure the root logger for an agent-relay application.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        log_level: Override the console level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Override the format (simple, detailed, json)
        enable_file: Allow the file handler; it is only added when
            ``enable_file_logging`` is also set in the configuration
        config: Logging configuration to use instead of ``get_settings().logging``
    """
    cfg = config or get_settings().logging
    level = (log_level or cfg.log_level).upper()
    fmt = log_format or cfg.log_format
    formatter = build_formatter(fmt)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture all levels, filter at handler level

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    file_logging = enable_file and cfg.enable_file_logging
    if file_logging:
        log_dir = Path(cfg.log_file_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / LOG_FILE_NAME)
        file_handler.setLevel(logging.DEBUG)  # Always log DEBUG to file
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for module_name, module_level in MODULE_LOG_LEVELS.items():
        logging.getLogger(module_name).setLevel(module_level)

    root_logger.info("Logging configured: level=%s, format=%s, file_logging=%s", level, fmt, file_logging)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The module name (typically __name__)

    Returns:
        A logger instance
    """
    return logging.getLogger(name)
