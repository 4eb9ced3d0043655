"""
Forum Steward - Database Module
===============================

Centralized database management for Forum Steward.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from src.core.database.manager import (
    DatabaseManager,
    get_db,
    DATA_DIR,
    DB_PATH,
)

from src.core.database.models import (
    GuildSettings,
    PendingLockRecord,
    TrackedThreadRecord,
    ThreadLinkRecord,
    AuditLogRecord,
)

__all__ = [
    # Main interface
    "DatabaseManager",
    "get_db",
    "DATA_DIR",
    "DB_PATH",

    # Type definitions
    "GuildSettings",
    "PendingLockRecord",
    "TrackedThreadRecord",
    "ThreadLinkRecord",
    "AuditLogRecord",
]
