"""
Forum Steward - Guild Settings Mixin
====================================

Per-guild forum configuration.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import time
from typing import TYPE_CHECKING, List, Optional

from src.core.config import encode_id_set, parse_id_set
from src.core.database.models import GuildSettings
from src.core.logger import logger

if TYPE_CHECKING:
    from src.core.database.manager import DatabaseManager


class SettingsMixin:
    """Mixin for guild settings operations."""

    def get_guild_settings(self: "DatabaseManager", guild_id: int) -> Optional[GuildSettings]:
        """
        Get settings for a guild.

        Returns:
            GuildSettings, or None when the guild is unconfigured.
        """
        row = self.fetchone(
            "SELECT * FROM guild_settings WHERE guild_id = ?",
            (guild_id,)
        )
        if not row:
            return None

        return GuildSettings(
            guild_id=row["guild_id"],
            guild_name=row["guild_name"] or "",
            forum_channel_id=row["forum_channel_id"],
            resolved_tag_id=row["resolved_tag_id"],
            duplicate_tag_id=row["duplicate_tag_id"],
            unanswered_tag_id=row["unanswered_tag_id"],
            helper_role_ids=parse_id_set(row["helper_role_ids"]),
            updated_at=row["updated_at"],
        )

    def save_guild_settings(self: "DatabaseManager", settings: GuildSettings) -> None:
        """Create or overwrite a guild's settings."""
        settings.updated_at = time.time()
        self.execute(
            """INSERT OR REPLACE INTO guild_settings
               (guild_id, guild_name, forum_channel_id, resolved_tag_id,
                duplicate_tag_id, unanswered_tag_id, helper_role_ids, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                settings.guild_id,
                settings.guild_name,
                settings.forum_channel_id,
                settings.resolved_tag_id,
                settings.duplicate_tag_id,
                settings.unanswered_tag_id,
                encode_id_set(settings.helper_role_ids),
                settings.updated_at,
            )
        )

        logger.tree("Guild Settings Saved", [
            ("Guild", f"{settings.guild_name} ({settings.guild_id})"),
            ("Forum", str(settings.forum_channel_id)),
            ("Helper Roles", str(len(settings.helper_role_ids))),
        ], emoji="⚙️")

    def get_configured_guild_ids(self: "DatabaseManager") -> List[int]:
        """Get every guild that has settings."""
        rows = self.fetchall("SELECT guild_id FROM guild_settings ORDER BY guild_id")
        return [row["guild_id"] for row in rows]
