"""
Forum Steward - Setup Command Package
=====================================

/setup and /settings for guild administrators.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import TYPE_CHECKING

from src.core.logger import logger

from .cog import SetupCog, resolve_forum_tag

if TYPE_CHECKING:
    from src.bot import StewardBot


async def setup(bot: "StewardBot") -> None:
    """Load the Setup cog."""
    await bot.add_cog(SetupCog(bot))
    logger.tree("Setup Cog Loaded", [
        ("Commands", "/setup, /settings"),
    ], emoji="⚙️")


__all__ = ["SetupCog", "resolve_forum_tag", "setup"]
