"""
Forum Steward - Audit Log Mixin
===============================

Append-only record of every lifecycle action.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import time
from typing import TYPE_CHECKING, List, Optional

from src.core.constants import AUDIT_DETAILS_MAX_LENGTH
from src.core.database.models import AuditLogRecord

if TYPE_CHECKING:
    from src.core.database.manager import DatabaseManager


class AuditMixin:
    """Mixin for audit log operations."""

    def add_audit_log(
        self: "DatabaseManager",
        guild_id: int,
        action: str,
        details: Optional[str] = None,
        actor_id: Optional[int] = None,
        actor_name: Optional[str] = None,
        command_text: Optional[str] = None,
        thread_id: Optional[int] = None,
        message_id: Optional[int] = None,
        created_at: Optional[float] = None,
    ) -> int:
        """
        Append an audit entry.

        Args:
            guild_id: Guild the action happened in.
            action: Action kind (GREET, LOCK, AUTO_CLOSE, ...).
            details: Free-form description, truncated for storage.
            actor_id: User who triggered the action, None for sweeps.
            actor_name: Display name of the actor.
            command_text: Slash command as typed, if any.
            thread_id: Thread the action applies to.
            message_id: Message the action produced or reacted to.
            created_at: Override timestamp (defaults to now).

        Returns:
            ID of the new row.
        """
        if details and len(details) > AUDIT_DETAILS_MAX_LENGTH:
            details = details[:AUDIT_DETAILS_MAX_LENGTH - 3] + "..."

        cursor = self.execute(
            """INSERT INTO audit_logs
               (guild_id, action, details, actor_id, actor_name, command_text,
                thread_id, message_id, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                guild_id, action, details, actor_id, actor_name, command_text,
                thread_id, message_id,
                created_at if created_at is not None else time.time(),
            )
        )
        return cursor.lastrowid or 0

    def get_audit_logs(
        self: "DatabaseManager",
        guild_id: int,
        limit: int = 50,
        action: Optional[str] = None,
    ) -> List[AuditLogRecord]:
        """Get a guild's most recent audit entries, newest first."""
        if action:
            rows = self.fetchall(
                """SELECT * FROM audit_logs
                   WHERE guild_id = ? AND action = ?
                   ORDER BY created_at DESC, id DESC LIMIT ?""",
                (guild_id, action, limit)
            )
        else:
            rows = self.fetchall(
                """SELECT * FROM audit_logs
                   WHERE guild_id = ?
                   ORDER BY created_at DESC, id DESC LIMIT ?""",
                (guild_id, limit)
            )
        return [dict(row) for row in rows]

    def prune_audit_logs(self: "DatabaseManager", older_than: float) -> int:
        """
        Delete audit entries created before a timestamp.

        Returns:
            Number of rows deleted.
        """
        cursor = self.execute(
            "DELETE FROM audit_logs WHERE created_at < ?",
            (older_than,)
        )
        return cursor.rowcount
