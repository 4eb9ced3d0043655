"""
Forum Steward - Forum Command Package
=====================================

/resolved, /cancel and /duplicate for help-forum threads.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import TYPE_CHECKING

from src.core.logger import logger

from .cog import ForumCog

if TYPE_CHECKING:
    from src.bot import StewardBot


async def setup(bot: "StewardBot") -> None:
    """Load the Forum cog."""
    await bot.add_cog(ForumCog(bot))
    logger.tree("Forum Cog Loaded", [
        ("Commands", "/resolved, /cancel, /duplicate"),
    ], emoji="🧵")


__all__ = ["ForumCog", "setup"]
