"""
Application logging.

One named logger (``logging.name`` in config) owns the handlers; modules log
through child loggers from ``get_logger("<component>")`` so records carry
the component in ``%(name)s`` and still reach the application handlers.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from math_grader.core.config import LoggingConfig, get_config, get_log_path

_HTTP_CLIENT_LOGGERS = ("httpx", "httpcore")

# Logger configured from the application config
_logger: Optional[logging.Logger] = None


def _level(name: str, default: int = logging.INFO) -> int:
    return getattr(logging, (name or "").upper(), default)


def _build_handlers(log_config: LoggingConfig, log_path: Path) -> List[logging.Handler]:
    formatter = logging.Formatter(log_config.format)
    handlers: List[logging.Handler] = [
        RotatingFileHandler(
            log_path,
            maxBytes=log_config.max_size * 1024 * 1024,
            backupCount=log_config.backup_count,
            encoding="utf-8",
        )
    ]
    if log_config.console:
        handlers.append(logging.StreamHandler(sys.stdout))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(
    log_config: Optional[LoggingConfig] = None,
    log_path: Optional[Path] = None,
) -> logging.Logger:
    """
    Configure the application logger.

    Called without arguments it configures the logger from the loaded
    application config once and caches it. An explicit ``log_config`` always
    (re)configures the logger it names and leaves the cache alone.

    Args:
        log_config: Logging section to apply instead of the loaded config.
        log_path: Log file; defaults to ``get_log_path()``.

    Returns:
        The configured logger.
    """
    global _logger

    from_app_config = log_config is None
    if from_app_config and _logger is not None:
        return _logger

    if log_config is None:
        log_config = get_config().logging
    if log_path is None:
        log_path = get_log_path()

    logger = logging.getLogger(log_config.name)
    logger.setLevel(_level(log_config.level))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in _build_handlers(log_config, log_path):
        logger.addHandler(handler)

    http_level = _level(log_config.http_client_level, logging.WARNING)
    for name in _HTTP_CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(http_level)

    if from_app_config:
        _logger = logger
    return logger


def get_logger(component: Optional[str] = None) -> logging.Logger:
    """
    Get the application logger, or a child logger for one component.

    Args:
        component: Short component name, e.g. ``"image_resolver"``.
    """
    logger = _logger if _logger is not None else setup_logging()
    if component:
        return logger.getChild(component)
    return logger
