"""
Forum Steward - Main Bot Class
==============================

Discord client that wires the lifecycle engine to the gateway.

Features:
- Welcome message and unanswered tag on new forum posts
- /resolved timer that tags and locks the thread
- /duplicate immediate close with redirect
- Stale warning and auto-close of idle threads
- Health check HTTP endpoint

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from datetime import datetime

import discord
from discord import app_commands
from discord.ext import commands

from src.core.config import get_config, validate_and_log_config
from src.core.database import get_db
from src.core.logger import logger
from src.utils.error_handler import ErrorHandler
from src.utils.interaction import safe_respond


# =============================================================================
# StewardBot Class
# =============================================================================

class StewardBot(commands.Bot):
    """
    Main Discord bot class for Forum Steward.

    DESIGN: Central orchestrator that:
    - Routes Discord events to the lifecycle engine through event cogs
    - Holds the engine, scheduler and health server
    - Manages bot lifecycle (startup, shutdown)

    SERVICE INITIALIZATION ORDER:
    1. setup_hook (before on_ready):
       - Command cog loading
       - Event cog loading
       - Persistent view registration
       - Command tree syncing

    2. on_ready:
       - Lifecycle service (engine + Discord gateway)
       - Startup backfill
       - Lifecycle scheduler (sweeps)
       - Health Check Server
    """

    # =========================================================================
    # Initialization
    # =========================================================================

    def __init__(self) -> None:
        self.config = get_config()

        # Forum threads and replies only; message content is never read
        intents = discord.Intents.default()
        intents.message_content = False

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None,
        )

        self.db = get_db()
        self.start_time: datetime = datetime.now()

        # Service placeholders
        self.lifecycle = None
        self.scheduler = None
        self.health_server = None

        # Ready state guard
        self._ready_initialized: bool = False

        logger.info("Bot Instance Created")

    # =========================================================================
    # Setup Hook
    # =========================================================================

    async def setup_hook(self) -> None:
        """Load cogs, register views and sync commands before on_ready."""
        from src.commands import COMMAND_COGS
        for cog in COMMAND_COGS:
            try:
                await self.load_extension(cog)
                logger.info(f"Cog Loaded: {cog.split('.')[-1]}")
            except commands.ExtensionError as e:
                logger.error("Failed to Load Cog", [("Cog", cog), ("Error", str(e))])

        from src.events import EVENT_COGS
        for cog in EVENT_COGS:
            try:
                await self.load_extension(cog)
                logger.debug(f"Event Cog Loaded: {cog.split('.')[-1]}")
            except commands.ExtensionError as e:
                logger.error("Failed to Load Event Cog", [("Cog", cog), ("Error", str(e))])

        from src.services.lifecycle import setup_lifecycle_views
        setup_lifecycle_views(self)

        self.tree.on_error = self.on_app_command_error

        try:
            synced = await self.tree.sync()
            logger.tree("Commands Synced", [("Count", str(len(synced)))], emoji="✅")
        except discord.HTTPException as e:
            logger.error("Command Sync Failed", [("Error", str(e))])

    # =========================================================================
    # On Ready
    # =========================================================================

    async def on_ready(self) -> None:
        """Initialize services when bot is ready."""
        if self._ready_initialized:
            logger.info("Bot Reconnected (skipping re-initialization)")
            return

        self._ready_initialized = True

        if not self.user:
            return

        logger.tree("BOT ONLINE", [
            ("Name", self.user.name),
            ("ID", str(self.user.id)),
            ("Guilds", str(len(self.guilds))),
        ], emoji="🚀")

        if self.config.error_webhook_url:
            logger.set_webhook(self.config.error_webhook_url)

        await self._init_services()

    async def _init_services(self) -> None:
        """Build the engine, backfill forums, then start the sweeps."""
        validate_and_log_config()

        from src.services.lifecycle import DiscordGateway, LifecycleScheduler, LifecycleService

        self.lifecycle = LifecycleService(
            db=self.db,
            gateway=DiscordGateway(self),
            config=self.config,
        )

        if self.config.backfill_enabled:
            tracked = await self.lifecycle.backfill()
            logger.tree("Startup Backfill Complete", [
                ("Guilds", str(len(self.db.get_configured_guild_ids()))),
                ("Newly Tracked", str(tracked)),
            ], emoji="📥")

        self.scheduler = LifecycleScheduler(self.lifecycle)
        await self.scheduler.start()

        if self.config.health_check_port:
            from src.core.health import HealthCheckServer
            self.health_server = HealthCheckServer(self, self.config.health_check_port)
            await self.health_server.start()

        logger.tree("Services Ready", [
            ("Lifecycle", "Running"),
            ("Scheduler", "Running" if self.scheduler.running else "Stopped"),
            ("Health Server", f"Port {self.config.health_check_port}" if self.health_server else "Disabled"),
        ], emoji="🧵")

    # =========================================================================
    # Error Handling
    # =========================================================================

    async def on_app_command_error(
        self,
        interaction: discord.Interaction,
        error: app_commands.AppCommandError,
    ) -> None:
        """Log slash command failures and tell the user something went wrong."""
        original: BaseException = getattr(error, "original", error)

        if isinstance(error, app_commands.CheckFailure):
            await safe_respond(interaction, "You don't have permission to use this command.")
            return

        ErrorHandler.handle(
            original,
            location=f"command:{interaction.command.qualified_name if interaction.command else 'unknown'}",
            critical=False,
            interaction=interaction,
        )
        await safe_respond(interaction, "Something went wrong running that command. It has been logged.")

    # =========================================================================
    # Shutdown
    # =========================================================================

    async def shutdown(self) -> None:
        """Graceful shutdown with proper cleanup."""
        logger.info("Initiating Graceful Shutdown")

        if self.scheduler:
            await self.scheduler.stop()

        if self.health_server:
            await self.health_server.stop()

        await super().close()
        self.db.close()

        logger.tree("SHUTDOWN COMPLETE", [
            ("Uptime", str(datetime.now() - self.start_time)),
        ], emoji="🛑")

    async def close(self) -> None:
        """Override close to ensure proper shutdown."""
        await self.shutdown()


__all__ = ["StewardBot"]
