"""Configuration module for EduFilter."""

from .settings import config, PresetConfig, AppConfig, Config
from .logging_config import setup_logging, get_logger

__all__ = [
    "config",
    "PresetConfig",
    "AppConfig",
    "Config",
    "setup_logging",
    "get_logger",
]
