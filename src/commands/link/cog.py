"""
Forum Steward - Link Cog
========================

Attach a reference link (docs page, original post, issue) to a help
thread so anyone landing in it can find the answer.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from src.core.logger import logger
from src.services.lifecycle.embeds import build_link_embed
from src.utils.interaction import safe_respond

from ..forum_helpers import deny, get_forum_context

if TYPE_CHECKING:
    from src.bot import StewardBot


class LinkCog(commands.Cog):
    """Cog for per-thread reference links."""

    link = app_commands.Group(
        name="link",
        description="Manage this post's reference link",
        guild_only=True,
    )

    def __init__(self, bot: "StewardBot") -> None:
        self.bot = bot

    # =========================================================================
    # /link set
    # =========================================================================

    @link.command(name="set", description="Attach a reference link to this post")
    @app_commands.describe(url="The link to attach")
    async def link_set(self, interaction: discord.Interaction, url: str) -> None:
        ctx = await get_forum_context(self.bot, interaction)
        if ctx is None:
            return

        if not ctx.can_manage:
            await deny(
                self.bot, interaction, "/link set", "Not thread owner or helper",
                "Only the post owner or a helper can set this post's link.",
            )
            return

        result = self.bot.lifecycle.set_link(
            thread_id=ctx.thread.id,
            guild_id=ctx.settings.guild_id,
            url=url,
            actor_id=interaction.user.id,
            actor_name=str(interaction.user),
        )
        if not result.ok:
            await safe_respond(interaction, result.message)
            return

        logger.tree("Thread Link Set", [
            ("Thread", f"{ctx.thread.name} ({ctx.thread.id})"),
            ("By", f"{interaction.user.name} ({interaction.user.id})"),
            ("URL", url[:100]),
        ], emoji="🔗")
        await safe_respond(interaction, embed=build_link_embed(url.strip(), interaction.user.id), ephemeral=False)

    # =========================================================================
    # /link show
    # =========================================================================

    @link.command(name="show", description="Show this post's reference link")
    async def link_show(self, interaction: discord.Interaction) -> None:
        ctx = await get_forum_context(self.bot, interaction)
        if ctx is None:
            return

        record = self.bot.db.get_thread_link(ctx.thread.id)
        if record is None:
            await safe_respond(interaction, "This thread has no link.")
            return

        await safe_respond(interaction, embed=build_link_embed(record["url"], record["creator_id"]))

    # =========================================================================
    # /link remove
    # =========================================================================

    @link.command(name="remove", description="Remove this post's reference link")
    async def link_remove(self, interaction: discord.Interaction) -> None:
        ctx = await get_forum_context(self.bot, interaction)
        if ctx is None:
            return

        if not ctx.can_manage:
            await deny(
                self.bot, interaction, "/link remove", "Not thread owner or helper",
                "Only the post owner or a helper can remove this post's link.",
            )
            return

        result = self.bot.lifecycle.remove_link(
            thread_id=ctx.thread.id,
            guild_id=ctx.settings.guild_id,
            actor_id=interaction.user.id,
            actor_name=str(interaction.user),
        )
        await safe_respond(interaction, result.message)


__all__ = ["LinkCog"]
