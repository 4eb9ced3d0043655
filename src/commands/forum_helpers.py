"""
Forum Steward - Shared Forum Command Helpers
============================================

Common checks for commands that act on a help-forum thread.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import discord

from src.core.config import is_helper, is_thread_owner
from src.core.constants import ACTION_DENIED
from src.core.database import GuildSettings
from src.core.logger import logger
from src.services.lifecycle.commands import NOT_CONFIGURED
from src.utils.interaction import safe_respond

if TYPE_CHECKING:
    from src.bot import StewardBot


# =============================================================================
# Forum Context
# =============================================================================

@dataclass
class ForumContext:
    """A command invocation inside a thread of the configured help forum."""

    thread: discord.Thread
    settings: GuildSettings
    is_owner: bool
    is_helper: bool

    @property
    def can_manage(self) -> bool:
        return self.is_owner or self.is_helper


async def get_forum_context(
    bot: "StewardBot",
    interaction: discord.Interaction,
) -> Optional[ForumContext]:
    """
    Validate that a command was run inside the help forum.

    Responds to the interaction and returns None when it wasn't, when
    the guild isn't set up, or when the bot is still starting.
    """
    if bot.lifecycle is None:
        await safe_respond(interaction, "Forum Steward is still starting up, try again in a moment.")
        return None

    if interaction.guild is None:
        await safe_respond(interaction, "This command only works inside a server.")
        return None

    settings = bot.db.get_guild_settings(interaction.guild.id)
    if settings is None:
        await safe_respond(interaction, NOT_CONFIGURED)
        return None

    channel = interaction.channel
    if not isinstance(channel, discord.Thread) or channel.parent_id != settings.forum_channel_id:
        await safe_respond(interaction, f"This command only works in a post inside <#{settings.forum_channel_id}>.")
        return None

    return ForumContext(
        thread=channel,
        settings=settings,
        is_owner=is_thread_owner(interaction.user.id, channel),
        is_helper=is_helper(interaction.user, settings.helper_role_ids),
    )


# =============================================================================
# Denials
# =============================================================================

async def deny(
    bot: "StewardBot",
    interaction: discord.Interaction,
    command_text: str,
    reason: str,
    message: str = "You don't have permission to use this command.",
) -> None:
    """Reply to a refused command and leave a DENIED audit entry."""
    logger.tree("Command Denied", [
        ("Command", command_text),
        ("User", f"{interaction.user.name} ({interaction.user.id})"),
        ("Reason", reason),
    ], emoji="🚫")

    if bot.lifecycle is not None and interaction.guild is not None:
        bot.lifecycle.audit.record(
            guild_id=interaction.guild.id,
            action=ACTION_DENIED,
            details=reason,
            actor_id=interaction.user.id,
            actor_name=str(interaction.user),
            command_text=command_text,
            thread_id=interaction.channel_id,
        )

    await safe_respond(interaction, message)


__all__ = ["ForumContext", "get_forum_context", "deny"]
