#!/usr/bin/env python3
"""
Forum Steward - Entry Point
===========================

Starts the Forum Steward Discord bot.

Features:
- Environment loading from .env
- Configuration validation before connecting
- Single instance enforcement
- Graceful error handling

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
import fcntl
import os
import sys
from pathlib import Path
from typing import IO, Optional

from dotenv import load_dotenv

from src.core.config import ConfigValidationError, get_config
from src.core.logger import logger
from src.utils.error_handler import ErrorHandler


PID_FILE = Path(__file__).parent / "data" / "steward.pid"

# Held open for the process lifetime so the flock stays in place
_lock_handle: Optional[IO[str]] = None


def check_running_instance() -> bool:
    """
    Check if another Forum Steward instance is already running.

    Returns:
        True if lock acquired successfully, False if another instance is running
    """
    global _lock_handle

    current_pid = os.getpid()
    PID_FILE.parent.mkdir(parents=True, exist_ok=True)

    if PID_FILE.exists():
        try:
            old_pid = int(PID_FILE.read_text().strip())
            try:
                os.kill(old_pid, 0)
                logger.error("Lock File Held By Running Process", [
                    ("PID", str(old_pid)),
                    ("Lock File", str(PID_FILE)),
                ])
                return False
            except OSError:
                logger.warning(f"Removing stale lock file (PID {old_pid} is dead)")
                PID_FILE.unlink()
        except (ValueError, OSError):
            PID_FILE.unlink(missing_ok=True)

    try:
        fp = open(PID_FILE, "w")
        fcntl.flock(fp.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        fp.write(str(current_pid))
        fp.flush()
        _lock_handle = fp
    except OSError as e:
        logger.error("Failed to Acquire Lock File", [
            ("Lock File", str(PID_FILE)),
            ("Error", str(e)),
        ])
        return False

    logger.info(f"Instance lock acquired - PID: {current_pid}")
    return True


async def main() -> None:
    """
    Main entry point for Forum Steward.

    Handles the complete bot lifecycle:
    1. Loads environment configuration
    2. Validates configuration (token, windows, URLs)
    3. Initializes the bot instance
    4. Establishes connection to Discord API

    Raises:
        SystemExit: If configuration is invalid or bot fails to start
    """
    load_dotenv()

    try:
        config = get_config()
    except ConfigValidationError as e:
        logger.error("Configuration Invalid", [("Error", str(e))])
        logger.error("   Please check your .env file")
        sys.exit(1)

    logger.tree("FORUM STEWARD STARTING", [
        ("Resolve Delay", f"{config.resolve_delay_minutes}m"),
        ("Stale Warning", f"{config.stale_warning_days}d"),
        ("Stale Close", f"{config.stale_close_days}d"),
        ("Commands", "/resolved, /cancel, /duplicate, /setup, /link"),
    ], emoji="🧵")

    from src.bot import StewardBot

    try:
        bot = StewardBot()
        async with bot:
            await bot.start(config.discord_token)

    except Exception as e:
        ErrorHandler.handle(
            e,
            location="main.main",
            critical=True,
            token_present=bool(config.discord_token),
        )
        sys.exit(1)


if __name__ == "__main__":
    if not check_running_instance():
        logger.error("Startup aborted - another instance is already running")
        sys.exit(1)

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped by user (Ctrl+C)")
