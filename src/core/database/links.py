"""
Forum Steward - Thread Links Mixin
==================================

One reference URL per thread, set and removed by its owner or helpers.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import time
from typing import TYPE_CHECKING, Optional

from src.core.database.models import ThreadLinkRecord

if TYPE_CHECKING:
    from src.core.database.manager import DatabaseManager


class LinksMixin:
    """Mixin for thread link operations."""

    def set_thread_link(
        self: "DatabaseManager",
        thread_id: int,
        guild_id: int,
        url: str,
        creator_id: int,
    ) -> None:
        """Attach a link to a thread, replacing any previous one."""
        self.execute(
            """INSERT OR REPLACE INTO thread_links
               (thread_id, guild_id, url, creator_id, created_at)
               VALUES (?, ?, ?, ?, ?)""",
            (thread_id, guild_id, url, creator_id, time.time())
        )

    def get_thread_link(self: "DatabaseManager", thread_id: int) -> Optional[ThreadLinkRecord]:
        row = self.fetchone(
            "SELECT * FROM thread_links WHERE thread_id = ?",
            (thread_id,)
        )
        return dict(row) if row else None

    def delete_thread_link(self: "DatabaseManager", thread_id: int) -> bool:
        cursor = self.execute(
            "DELETE FROM thread_links WHERE thread_id = ?",
            (thread_id,)
        )
        return cursor.rowcount > 0
