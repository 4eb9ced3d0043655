#!/usr/bin/env python3
"""
One-shot slash command registration.

Logs in without opening a gateway connection, loads the command cogs
and syncs the command tree. With DEV_GUILD_ID set the commands are
copied to that guild, where they appear instantly; otherwise they are
synced globally.
"""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import discord
from discord.ext import commands
from dotenv import load_dotenv

from src.commands import COMMAND_COGS
from src.core.config import ConfigValidationError, get_config
from src.core.logger import logger


class SyncBot(commands.Bot):
    """Minimal bot that only registers commands."""

    def __init__(self, guild_id):
        super().__init__(command_prefix=commands.when_mentioned, intents=discord.Intents.none())
        self.guild_id = guild_id
        self.lifecycle = None
        self.synced = []

    async def setup_hook(self) -> None:
        for cog in COMMAND_COGS:
            await self.load_extension(cog)

        if self.guild_id:
            guild = discord.Object(id=self.guild_id)
            self.tree.copy_global_to(guild=guild)
            self.synced = await self.tree.sync(guild=guild)
        else:
            self.synced = await self.tree.sync()


async def sync_commands() -> int:
    load_dotenv()
    try:
        config = get_config()
    except ConfigValidationError as e:
        logger.error("Configuration Invalid", [("Error", str(e))])
        return 1

    bot = SyncBot(config.dev_guild_id)
    async with bot:
        try:
            await bot.login(config.discord_token)
        except discord.HTTPException as e:
            logger.error("Command Sync Failed", [("Error", str(e))])
            return 1

    logger.tree("Slash Commands Registered", [
        ("Scope", f"Guild {config.dev_guild_id}" if config.dev_guild_id else "Global"),
        ("Commands", ", ".join(f"/{c.name}" for c in bot.synced)),
    ], emoji="✅")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(sync_commands()))
