"""
Forum Steward - Thread Events
=============================

Feeds new forum threads into the lifecycle engine.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from src.core.logger import logger
from src.services.lifecycle import snapshot_from_thread

if TYPE_CHECKING:
    from src.bot import StewardBot


class ThreadEvents(commands.Cog):
    """Thread create handler."""

    def __init__(self, bot: "StewardBot") -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_thread_create(self, thread: discord.Thread) -> None:
        """Greet and start tracking threads created in a configured forum."""
        if self.bot.lifecycle is None:
            return
        if not isinstance(thread.parent, discord.ForumChannel):
            return

        greeted = await self.bot.lifecycle.thread_created(snapshot_from_thread(thread))
        if greeted:
            logger.tree("Forum Thread Created", [
                ("Thread", f"{thread.name} ({thread.id})"),
                ("Owner", str(thread.owner_id)),
                ("Guild", thread.guild.name),
            ], emoji="🆕")


async def setup(bot: "StewardBot") -> None:
    """Load the ThreadEvents cog."""
    await bot.add_cog(ThreadEvents(bot))
