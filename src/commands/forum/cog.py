"""
Forum Steward - Forum Cog
=========================

Thread lifecycle commands: /resolved, /cancel and /duplicate.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import discord
from discord import app_commands
from discord.ext import commands

from src.core.constants import ACTION_CANCEL, MAX_RESOLVE_DELAY_MINUTES
from src.core.logger import logger
from src.services.lifecycle.embeds import build_cancelled_embed, build_renewed_embed, build_resolved_embed
from src.utils.interaction import safe_defer, safe_respond

from ..forum_helpers import deny, get_forum_context

if TYPE_CHECKING:
    from src.bot import StewardBot


class ForumCog(commands.Cog):
    """Slash commands that move a help thread through its lifecycle."""

    def __init__(self, bot: "StewardBot") -> None:
        self.bot = bot

    # =========================================================================
    # /resolved
    # =========================================================================

    @app_commands.command(name="resolved", description="Mark this post as resolved and lock it after a delay")
    @app_commands.describe(minutes="Minutes before the thread locks (helpers only)")
    @app_commands.guild_only()
    async def resolved(
        self,
        interaction: discord.Interaction,
        minutes: Optional[app_commands.Range[int, 0, MAX_RESOLVE_DELAY_MINUTES]] = None,
    ) -> None:
        """Arm the resolve timer for the current thread."""
        ctx = await get_forum_context(self.bot, interaction)
        if ctx is None:
            return

        if not ctx.can_manage:
            await deny(
                self.bot, interaction, "/resolved", "Not thread owner or helper",
                "Only the post owner or a helper can mark this as resolved.",
            )
            return

        if minutes is not None and not ctx.is_helper:
            await deny(
                self.bot, interaction, "/resolved", "Custom delay without helper role",
                "Only helpers can choose a custom delay.",
            )
            return

        result = self.bot.lifecycle.resolve(
            thread_id=ctx.thread.id,
            guild_id=ctx.settings.guild_id,
            delay_minutes=minutes,
            actor_id=interaction.user.id,
            actor_name=str(interaction.user),
        )
        if not result.ok:
            await safe_respond(interaction, result.message)
            return

        logger.tree("Thread Resolved", [
            ("Thread", f"{ctx.thread.name} ({ctx.thread.id})"),
            ("By", f"{interaction.user.name} ({interaction.user.id})"),
            ("Delay", f"{result.delay_minutes}m"),
        ], emoji="✅")

        await safe_respond(
            interaction,
            embed=build_resolved_embed(result.delay_minutes, result.fire_at),
            ephemeral=False,
        )

    # =========================================================================
    # /cancel
    # =========================================================================

    @app_commands.command(name="cancel", description="Cancel a pending lock or auto-close on this post")
    @app_commands.guild_only()
    async def cancel(self, interaction: discord.Interaction) -> None:
        """Cancel the resolve timer, or renew a warned thread."""
        ctx = await get_forum_context(self.bot, interaction)
        if ctx is None:
            return

        if not ctx.can_manage:
            await deny(
                self.bot, interaction, "/cancel", "Not thread owner or helper",
                "Only the post owner or a helper can cancel this.",
            )
            return

        result = self.bot.lifecycle.cancel(
            thread_id=ctx.thread.id,
            guild_id=ctx.settings.guild_id,
            actor_id=interaction.user.id,
            actor_name=str(interaction.user),
        )
        if not result.ok:
            await safe_respond(interaction, result.message)
            return

        embed = build_cancelled_embed() if result.action == ACTION_CANCEL else build_renewed_embed()
        await safe_respond(interaction, embed=embed, ephemeral=False)

    # =========================================================================
    # /duplicate
    # =========================================================================

    @app_commands.command(name="duplicate", description="Close this post as a duplicate of another")
    @app_commands.describe(link="Link to the original post that answers this one")
    @app_commands.guild_only()
    async def duplicate(self, interaction: discord.Interaction, link: str) -> None:
        """Tag, redirect and lock the current thread immediately."""
        ctx = await get_forum_context(self.bot, interaction)
        if ctx is None:
            return

        if not ctx.is_helper:
            await deny(
                self.bot, interaction, "/duplicate", "Not a helper",
                "Only helpers can close posts as duplicates.",
            )
            return

        await safe_defer(interaction)

        result = await self.bot.lifecycle.duplicate(
            thread_id=ctx.thread.id,
            guild_id=ctx.settings.guild_id,
            original_link=link,
            actor_id=interaction.user.id,
            actor_name=str(interaction.user),
        )

        if result.ok:
            logger.tree("Thread Closed As Duplicate", [
                ("Thread", f"{ctx.thread.name} ({ctx.thread.id})"),
                ("By", f"{interaction.user.name} ({interaction.user.id})"),
                ("Original", link[:100]),
            ], emoji="📑")

        await safe_respond(interaction, result.message)


__all__ = ["ForumCog"]
