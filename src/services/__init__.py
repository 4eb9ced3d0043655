"""
Forum Steward - Services Package
================================

Long-running services for Forum Steward.

DESIGN:
    Services are standalone classes holding the bot's behaviour. They
    should:
    - Be async-compatible for non-blocking I/O
    - Handle their own error cases gracefully
    - Receive their collaborators instead of reaching for globals

Available Services:
    LifecycleService: Forum thread lifecycle engine
    LifecycleScheduler: Background resolve-lock and stale sweeps

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from .lifecycle import LifecycleService, LifecycleScheduler


__all__ = [
    "LifecycleService",
    "LifecycleScheduler",
]
