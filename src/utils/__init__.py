"""
Forum Steward - Utils Package
=============================

Utility modules for Forum Steward.

DESIGN:
    Utils are stateless helper functions and classes that can be
    used anywhere in the codebase. They should not have side effects
    or depend on bot state.

Available Utilities:
    async_utils: attempt() wrapper and safe background tasks
    error_handler: Categorized error logging
    discord_rate_limit: Rate limit retry and HTTP error logging
    interaction: safe_respond / safe_defer
    time_format: Duration and timestamp formatting

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from .async_utils import AttemptResult, attempt, create_safe_task
from .time_format import format_duration, discord_timestamp


__all__ = [
    "AttemptResult",
    "attempt",
    "create_safe_task",
    "format_duration",
    "discord_timestamp",
]
