"""
Forum Steward - Error Handler
=============================

Provides detailed error context and improved logging for debugging.

Features:
- Error categorization (Discord, API, Database)
- Recovery suggestions per category
- Discord interaction context capture
- Critical error file logging

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import json
import sqlite3
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

import discord

from src.core.logger import logger


ERROR_DIR = Path("logs/errors")


class ErrorContext:
    """Captures and formats detailed error context."""

    @staticmethod
    def get_full_context(e: BaseException, location: str, **kwargs) -> Dict[str, Any]:
        """
        Get comprehensive error context.

        Args:
            e: The exception
            location: Where the error occurred
            **kwargs: Additional context (interaction, thread_id, ...)

        Returns:
            Dictionary with full error context
        """
        context = {
            "timestamp": datetime.now().isoformat(),
            "location": location,
            "error_type": type(e).__name__,
            "error_message": str(e),
            "traceback": "".join(traceback.format_exception(type(e), e, e.__traceback__)),
            "python_version": sys.version,
            "additional_context": {k: v for k, v in kwargs.items() if k != "interaction"},
        }

        interaction = kwargs.get("interaction")
        if isinstance(interaction, discord.Interaction):
            context["discord_context"] = {
                "guild": interaction.guild.name if interaction.guild else "DM",
                "channel": getattr(interaction.channel, "name", str(interaction.channel_id)),
                "user": str(interaction.user),
                "user_id": interaction.user.id,
                "command": interaction.command.qualified_name if interaction.command else None,
            }

        return context


class ErrorHandler:
    """Error handling with categorization and recovery hints."""

    ERROR_CATEGORIES = {
        "discord": (discord.Forbidden, discord.NotFound, discord.HTTPException),
        "database": (sqlite3.Error,),
        "api": (ConnectionError, TimeoutError, OSError),
    }

    RECOVERY_SUGGESTIONS = {
        discord.Forbidden: "Check the bot's Manage Threads permission on the forum",
        discord.NotFound: "Thread or channel was deleted - rows are cleaned up by the next sweep",
        discord.HTTPException: "Discord API issue - the next sweep will pick it up",
        sqlite3.OperationalError: "Database locked or unreadable - check the data directory",
        sqlite3.IntegrityError: "Database constraint violation - check data validity",
        sqlite3.Error: "General database error - check database file",
        ConnectionError: "Network connection issue - check internet connection",
        TimeoutError: "Request timed out - the next sweep will retry",
        OSError: "System resource issue - check disk space and permissions",
    }

    @classmethod
    def categorize_error(cls, e: BaseException) -> str:
        """Return the category name for an exception."""
        for category, error_types in cls.ERROR_CATEGORIES.items():
            if isinstance(e, error_types):
                return category
        return "general"

    @classmethod
    def get_recovery_suggestion(cls, e: BaseException) -> str:
        """Return the first matching recovery suggestion (most specific first)."""
        for error_type, suggestion in cls.RECOVERY_SUGGESTIONS.items():
            if isinstance(e, error_type):
                return suggestion
        return "Unexpected error - check logs for details"

    @classmethod
    def handle(cls, e: BaseException, location: str, critical: bool = False, **context) -> None:
        """
        Handle an error with full context.

        Args:
            e: The exception
            location: Where the error occurred
            critical: Whether this error should be persisted for analysis
            **context: Additional context
        """
        category = cls.categorize_error(e)
        suggestion = cls.get_recovery_suggestion(e)
        full_context = ErrorContext.get_full_context(e, location, **context)

        details = [
            ("Category", category.upper()),
            ("Location", location),
            ("Type", full_context["error_type"]),
            ("Error", full_context["error_message"][:200]),
            ("Recovery", suggestion),
        ]
        if "discord_context" in full_context:
            dc = full_context["discord_context"]
            details.append(("User", f"{dc['user']} ({dc['user_id']})"))
            if dc["command"]:
                details.append(("Command", f"/{dc['command']}"))

        if critical:
            logger.error("💥 Critical Error", details)
            cls._store_critical_error(full_context)
        else:
            logger.warning("Handled Error", details)

    @staticmethod
    def _store_critical_error(context: Dict[str, Any]) -> None:
        """Dump a critical error's context to logs/errors/*.json."""
        try:
            ERROR_DIR.mkdir(exist_ok=True, parents=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            error_file = ERROR_DIR / f"error_{timestamp}.json"
            with open(error_file, "w", encoding="utf-8") as f:
                json.dump(context, f, indent=2, default=str)
            logger.info(f"Critical error saved to {error_file}")
        except OSError as save_error:
            logger.warning(f"Failed to save error details: {save_error}")


__all__ = ["ErrorContext", "ErrorHandler"]
