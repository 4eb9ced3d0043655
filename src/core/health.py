"""
Forum Steward - Health Check Server
===================================

HTTP health check endpoint for external monitoring.

DESIGN:
    A lightweight aiohttp server that uptime checkers can ping. The
    /health endpoint returns JSON with the Discord connection state, the
    scheduler's last sweep results and registry row counts, without
    exposing any message content.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import sqlite3
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from aiohttp import web

from src.core.config import NY_TZ
from src.core.logger import logger

if TYPE_CHECKING:
    from src.bot import StewardBot


# =============================================================================
# Health Check Server
# =============================================================================

class HealthCheckServer:
    """
    Simple HTTP health check server for monitoring.

    Attributes:
        bot: Reference to the main bot instance.
        port: Port number for the HTTP server.
        app: aiohttp Application instance.
        runner: aiohttp AppRunner for lifecycle management.
    """

    def __init__(self, bot: "StewardBot", port: int = 8085) -> None:
        self.bot = bot
        self.port = port
        self.app = web.Application()
        self.runner: Optional[web.AppRunner] = None

        self.app.router.add_get("/health", self.health_handler)
        self.app.router.add_get("/", self.health_handler)

    # =========================================================================
    # Request Handlers
    # =========================================================================

    def build_status(self) -> dict:
        """
        Collect the health payload.

        "healthy" means connected to Discord with the scheduler running;
        "starting" means still initializing; "degraded" means connected
        but a sweep loop is down or reporting errors.
        """
        is_connected = self.bot.is_ready()
        scheduler = getattr(self.bot, "scheduler", None)
        scheduler_status = scheduler.status() if scheduler else None

        if not is_connected:
            state = "starting"
        elif scheduler_status is None or not scheduler_status["running"] or scheduler_status["errors"]:
            state = "degraded"
        else:
            state = "healthy"

        status = {
            "status": state,
            "bot": "Forum Steward",
            "connected": is_connected,
            "guilds": len(self.bot.guilds),
            "scheduler": scheduler_status,
            "timestamp": datetime.now(NY_TZ).isoformat(),
        }

        db = getattr(self.bot, "db", None)
        if db is not None:
            status["registry"] = db.count_lifecycle_rows()

        return status

    async def health_handler(self, request: web.Request) -> web.Response:
        """Handle health check requests."""
        try:
            status = self.build_status()
        except sqlite3.Error as e:
            logger.error("Health Check Error", [
                ("Error", str(e)[:100]),
            ])
            return web.json_response({"status": "error", "error": str(e)}, status=500)

        logger.debug(f"Health check: {status['status']}")
        return web.json_response(status, status=200 if status["status"] != "degraded" else 503)

    # =========================================================================
    # Lifecycle Management
    # =========================================================================

    async def start(self) -> None:
        """Start the health check server on all interfaces."""
        try:
            self.runner = web.AppRunner(self.app)
            await self.runner.setup()
            site = web.TCPSite(self.runner, "0.0.0.0", self.port)
            await site.start()

            logger.tree("Health Server Started", [
                ("Port", str(self.port)),
                ("Endpoint", f"http://0.0.0.0:{self.port}/health"),
            ], emoji="🏥")

        except OSError as e:
            logger.error("Health Server Startup Failed", [
                ("Port", str(self.port)),
                ("Error", str(e)[:100]),
            ])

    async def stop(self) -> None:
        """Stop the health check server; safe if it never started."""
        if self.runner:
            await self.runner.cleanup()
            self.runner = None
            logger.info("Health check server stopped")


__all__ = ["HealthCheckServer"]
