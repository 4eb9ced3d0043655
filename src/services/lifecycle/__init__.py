"""
Forum Steward - Thread Lifecycle
================================

Forum thread lifecycle engine, its scheduler and its Discord adapter.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import TYPE_CHECKING

from .audit import AuditSink
from .gateway import (
    DiscordGateway,
    GatewayError,
    OutgoingMessage,
    ThreadGateway,
    ThreadNotFound,
    ThreadSnapshot,
    merge_tags,
    snapshot_from_thread,
)
from .scheduler import LifecycleScheduler
from .service import CommandResult, LifecycleService, SweepStats
from .views import KeepOpenButton, build_keep_open_view

if TYPE_CHECKING:
    from src.bot import StewardBot


def setup_lifecycle_views(bot: "StewardBot") -> None:
    """Register persistent dynamic items."""
    bot.add_dynamic_items(KeepOpenButton)


__all__ = [
    # Service
    "LifecycleService",
    "LifecycleScheduler",
    "CommandResult",
    "SweepStats",
    "AuditSink",
    # Gateway
    "ThreadGateway",
    "DiscordGateway",
    "ThreadSnapshot",
    "OutgoingMessage",
    "GatewayError",
    "ThreadNotFound",
    "merge_tags",
    "snapshot_from_thread",
    # Views
    "KeepOpenButton",
    "build_keep_open_view",
    "setup_lifecycle_views",
]
