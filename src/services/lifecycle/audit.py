"""
Forum Steward - Audit Sink
==========================

Write-only record of every action the lifecycle engine takes.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import sqlite3
import time
from typing import TYPE_CHECKING, Callable, Optional

from src.core.logger import logger

if TYPE_CHECKING:
    from src.core.database import DatabaseManager


ACTION_EMOJIS = {
    "GREET": "👋",
    "ANSWERED": "💬",
    "RESOLVED": "✅",
    "LOCK": "🔒",
    "CANCEL": "↩️",
    "THREAD_RENEWED": "🔄",
    "DUPLICATE": "📑",
    "STALE_WARNING": "⚠️",
    "AUTO_CLOSE": "🔐",
    "SETUP": "⚙️",
    "LINK_SET": "🔗",
    "LINK_REMOVED": "🔗",
    "DENIED": "🚫",
}


class AuditSink:
    """
    Append-only audit log backed by the audit_logs table.

    DESIGN:
        Fire-and-forget: a failed audit write is logged and dropped so an
        audit problem never undoes or blocks the action it describes.
    """

    def __init__(self, db: "DatabaseManager", clock: Callable[[], float] = time.time) -> None:
        self.db = db
        self.clock = clock

    def record(
        self,
        guild_id: int,
        action: str,
        details: Optional[str] = None,
        actor_id: Optional[int] = None,
        actor_name: Optional[str] = None,
        command_text: Optional[str] = None,
        thread_id: Optional[int] = None,
        message_id: Optional[int] = None,
    ) -> None:
        """Append one audit entry."""
        try:
            self.db.add_audit_log(
                guild_id=guild_id,
                action=action,
                details=details,
                actor_id=actor_id,
                actor_name=actor_name,
                command_text=command_text,
                thread_id=thread_id,
                message_id=message_id,
                created_at=self.clock(),
            )
        except sqlite3.Error as e:
            logger.error("Audit Write Failed", [
                ("Action", action),
                ("Guild ID", str(guild_id)),
                ("Error", str(e)[:100]),
            ])
            return

        items = [
            ("Guild ID", str(guild_id)),
            ("Thread ID", str(thread_id) if thread_id else "-"),
        ]
        if actor_id:
            items.append(("Actor", f"{actor_name or 'Unknown'} ({actor_id})"))
        if details:
            items.append(("Details", details[:100]))
        logger.tree(f"Audit: {action}", items, emoji=ACTION_EMOJIS.get(action, "📝"))


__all__ = ["AuditSink"]
