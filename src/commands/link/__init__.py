"""
Forum Steward - Link Command Package
====================================

/link set, /link show and /link remove for help threads.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import TYPE_CHECKING

from src.core.logger import logger

from .cog import LinkCog

if TYPE_CHECKING:
    from src.bot import StewardBot


async def setup(bot: "StewardBot") -> None:
    """Load the Link cog."""
    await bot.add_cog(LinkCog(bot))
    logger.tree("Link Cog Loaded", [
        ("Commands", "/link set, /link show, /link remove"),
    ], emoji="🔗")


__all__ = ["LinkCog", "setup"]
