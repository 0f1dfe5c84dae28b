"""
Core module initialization.
"""

from math_grader.core.config import AppConfig, AISettings, ModelKind, get_config, load_config
from math_grader.core.logging import get_logger, setup_logging

__all__ = [
    "AppConfig",
    "AISettings",
    "ModelKind",
    "get_config",
    "load_config",
    "get_logger",
    "setup_logging",
]
