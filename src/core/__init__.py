"""
Forum Steward - Core Package
============================

Core components: configuration, logging, database and health monitoring.

DESIGN:
    Core modules are designed as singletons or global instances
    to ensure consistent state across the application:
    - get_config() returns the same Config instance
    - get_db() returns the same DatabaseManager instance
    - logger is a global TreeLogger instance

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from .config import (
    Config,
    ConfigValidationError,
    EmbedColors,
    NY_TZ,
    get_config,
    is_developer,
    is_helper,
)

from .database import DatabaseManager, get_db

from .logger import logger, TreeLogger


__all__ = [
    # Config
    "Config",
    "ConfigValidationError",
    "EmbedColors",
    "NY_TZ",
    "get_config",
    "is_developer",
    "is_helper",
    # Database
    "DatabaseManager",
    "get_db",
    # Logger
    "logger",
    "TreeLogger",
]
