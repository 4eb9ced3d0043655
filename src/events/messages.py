"""
Forum Steward - Message Events
==============================

Feeds human replies in forum threads into the lifecycle engine.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

if TYPE_CHECKING:
    from src.bot import StewardBot


class MessageEvents(commands.Cog):
    """Message create handler."""

    def __init__(self, bot: "StewardBot") -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        """Route thread replies to the engine (answered tag, stale renewal)."""
        if message.author.bot or message.guild is None:
            return
        if self.bot.lifecycle is None:
            return

        thread = message.channel
        if not isinstance(thread, discord.Thread):
            return

        await self.bot.lifecycle.message_posted(
            thread_id=thread.id,
            guild_id=message.guild.id,
            author_id=message.author.id,
            is_owner=message.author.id == thread.owner_id,
            message_id=message.id,
        )


async def setup(bot: "StewardBot") -> None:
    """Load the MessageEvents cog."""
    await bot.add_cog(MessageEvents(bot))
