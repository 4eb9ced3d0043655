"""
Forum Steward - Lifecycle Views
===============================

Persistent "Keep Post Open" button attached to stale warnings.

DESIGN:
    A DynamicItem encodes the thread id in its custom_id, so the button
    keeps working after restarts without any stored view state.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import discord

from src.core.constants import KEEP_OPEN_CUSTOM_ID_PREFIX
from src.core.logger import logger
from src.utils.interaction import safe_respond


class KeepOpenButton(
    discord.ui.DynamicItem[discord.ui.Button],
    template=KEEP_OPEN_CUSTOM_ID_PREFIX + r":(?P<thread_id>\d+)",
):
    """Persistent button letting a thread owner cancel a pending auto-close."""

    def __init__(self, thread_id: int):
        super().__init__(
            discord.ui.Button(
                label="Keep Post Open",
                style=discord.ButtonStyle.success,
                custom_id=f"{KEEP_OPEN_CUSTOM_ID_PREFIX}:{thread_id}",
                emoji="🔓",
            )
        )
        self.thread_id = thread_id

    @classmethod
    async def from_custom_id(
        cls,
        interaction: discord.Interaction,
        item: discord.ui.Button,
        match,
    ) -> "KeepOpenButton":
        return cls(int(match.group("thread_id")))

    async def callback(self, interaction: discord.Interaction) -> None:
        service = getattr(interaction.client, "lifecycle", None)
        if service is None or interaction.guild is None:
            logger.warning("Keep Open pressed but lifecycle service unavailable")
            await safe_respond(interaction, "Forum Steward is still starting up, try again in a moment.")
            return

        result = await service.keep_open(
            thread_id=self.thread_id,
            guild_id=interaction.guild.id,
            actor_id=interaction.user.id,
            actor_name=str(interaction.user),
        )

        if not result.ok:
            await safe_respond(interaction, result.message)
            return

        try:
            await interaction.response.edit_message(view=None)
        except discord.HTTPException as e:
            logger.debug(f"Keep Open button removal failed: {e.status}")
        await safe_respond(interaction, result.message, ephemeral=False)


def build_keep_open_view(thread_id: int) -> discord.ui.View:
    """Build a view holding the Keep Post Open button for a thread."""
    view = discord.ui.View(timeout=None)
    view.add_item(KeepOpenButton(thread_id))
    return view


__all__ = ["KeepOpenButton", "build_keep_open_view"]
