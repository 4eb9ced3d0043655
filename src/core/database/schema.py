"""
Forum Steward - Database Schema Module
======================================

Table definitions and indexes.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import sqlite3
from typing import TYPE_CHECKING

from src.core.logger import logger

if TYPE_CHECKING:
    from src.core.database.manager import DatabaseManager


class SchemaMixin:
    """Mixin for database schema initialization."""

    def _init_tables(self: "DatabaseManager") -> None:
        """
        Initialize all database tables.

        DESIGN: Tables are created if not exist, allowing safe restarts.
        Every lifecycle table is keyed by thread_id so each read or write
        touches exactly one row.
        """
        conn = self._ensure_connection()
        cursor = conn.cursor()

        # -----------------------------------------------------------------
        # Guild Settings Table
        # DESIGN: Overwritten wholesale by /setup, never deleted
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS guild_settings (
                guild_id INTEGER PRIMARY KEY,
                guild_name TEXT NOT NULL DEFAULT '',
                forum_channel_id INTEGER NOT NULL,
                resolved_tag_id INTEGER NOT NULL,
                duplicate_tag_id INTEGER NOT NULL,
                unanswered_tag_id INTEGER,
                helper_role_ids TEXT NOT NULL DEFAULT '',
                updated_at REAL NOT NULL
            )
        """)

        # -----------------------------------------------------------------
        # Pending Locks Table
        # DESIGN: Row presence means the resolve timer is armed
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS pending_locks (
                thread_id INTEGER PRIMARY KEY,
                guild_id INTEGER NOT NULL,
                fire_at REAL NOT NULL,
                created_at REAL NOT NULL
            )
        """)
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_pending_locks_fire ON pending_locks(fire_at)"
        )

        # -----------------------------------------------------------------
        # Tracked Threads Table
        # DESIGN: Stale detection bookkeeping, one row per forum thread
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS tracked_threads (
                thread_id INTEGER PRIMARY KEY,
                guild_id INTEGER NOT NULL,
                created_at REAL NOT NULL,
                stale_warning_sent INTEGER NOT NULL DEFAULT 0,
                last_renewed_at REAL,
                warned_at REAL
            )
        """)
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_tracked_threads_warning ON tracked_threads(stale_warning_sent, created_at)"
        )
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_tracked_threads_guild ON tracked_threads(guild_id)"
        )
        try:
            cursor.execute("ALTER TABLE tracked_threads ADD COLUMN warned_at REAL")
        except sqlite3.OperationalError:
            pass

        # -----------------------------------------------------------------
        # Thread Links Table
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS thread_links (
                thread_id INTEGER PRIMARY KEY,
                guild_id INTEGER NOT NULL,
                url TEXT NOT NULL,
                creator_id INTEGER NOT NULL,
                created_at REAL NOT NULL
            )
        """)

        # -----------------------------------------------------------------
        # Audit Logs Table
        # DESIGN: Append-only, the engine never reads it back
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS audit_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                guild_id INTEGER NOT NULL,
                action TEXT NOT NULL,
                details TEXT,
                actor_id INTEGER,
                actor_name TEXT,
                command_text TEXT,
                thread_id INTEGER,
                message_id INTEGER,
                created_at REAL NOT NULL
            )
        """)
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_audit_logs_guild_time ON audit_logs(guild_id, created_at DESC)"
        )
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_audit_logs_action ON audit_logs(action)"
        )

        conn.commit()

        logger.debug("Database Tables Ready", [
            ("Tables", "guild_settings, pending_locks, tracked_threads, thread_links, audit_logs"),
        ])
