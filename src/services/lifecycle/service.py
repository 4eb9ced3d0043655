"""
Forum Steward - Lifecycle Service
=================================

The thread-lifecycle engine: tracks every forum thread from creation
through resolution or closure.

DESIGN:
    All collaborators are injected (store, gateway, config, clock), so the
    engine runs the same against Discord and against in-memory fakes.
    Row presence is the state: a pending_locks row means "will lock", a
    tracked_threads row means "watched for inactivity".

    Mixins:
    - SweepsMixin: resolve-lock and stale sweeps
    - EventsMixin: thread created, message posted, startup backfill
    - CommandsMixin: resolve, cancel, keep-open, duplicate, links

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Coroutine, Optional, Set

from src.core.config import Config
from src.core.logger import logger
from src.utils.async_utils import AttemptResult, attempt

from .audit import AuditSink
from .commands import CommandsMixin
from .events import EventsMixin
from .gateway import ThreadGateway
from .sweeps import SweepsMixin
from .views import build_keep_open_view

if TYPE_CHECKING:
    from src.core.database import DatabaseManager


# =============================================================================
# Results
# =============================================================================

@dataclass
class CommandResult:
    """Outcome of a user intent. Failed results never changed state."""

    ok: bool
    message: str
    action: Optional[str] = None
    fire_at: Optional[float] = None
    delay_minutes: Optional[int] = None


@dataclass
class SweepStats:
    """Counters for one sweep pass."""

    name: str
    started_at: float
    finished_at: Optional[float] = None
    examined: int = 0
    acted: int = 0
    skipped: int = 0
    failed: int = 0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "examined": self.examined,
            "acted": self.acted,
            "skipped": self.skipped,
            "failed": self.failed,
        }


# =============================================================================
# Service
# =============================================================================

class LifecycleService(SweepsMixin, EventsMixin, CommandsMixin):
    """
    Forum thread lifecycle engine.

    Args:
        db: Registry, settings and audit store.
        gateway: Chat platform operations.
        config: Process configuration (windows, timeouts).
        clock: Callable returning epoch seconds.
        audit: Audit sink (defaults to one writing to db).
        view_factory: Builds the Keep Post Open view for a thread id,
            or None to send warnings without a button.
    """

    def __init__(
        self,
        db: "DatabaseManager",
        gateway: ThreadGateway,
        config: Config,
        clock: Callable[[], float] = time.time,
        audit: Optional[AuditSink] = None,
        view_factory: Optional[Callable[[int], Any]] = build_keep_open_view,
    ) -> None:
        self.db = db
        self.gateway = gateway
        self.config = config
        self.clock = clock
        self.audit = audit or AuditSink(db, clock)
        self.view_factory = view_factory
        self._tag_claims: Set[int] = set()

        logger.tree("Lifecycle Service Initialized", [
            ("Resolve Delay", f"{config.resolve_delay_minutes}m"),
            ("Stale Warning", f"{config.stale_warning_days}d"),
            ("Stale Close", f"{max(config.stale_close_days, config.stale_warning_days)}d"),
            ("Gateway Timeout", f"{config.gateway_timeout}s"),
        ], emoji="🧵")

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _call(
        self,
        name: str,
        coro: Coroutine[Any, Any, Any],
        context: str,
    ) -> AttemptResult:
        """Run one gateway call under the configured timeout."""
        return await attempt(name, coro, timeout=self.config.gateway_timeout, context=context)

    @staticmethod
    def _result(ok: bool, message: str, action: Optional[str] = None, **extra) -> CommandResult:
        return CommandResult(ok=ok, message=message, action=action, **extra)

    def _new_stats(self, name: str) -> SweepStats:
        return SweepStats(name=name, started_at=self.clock())

    def _finish_stats(self, stats: SweepStats) -> SweepStats:
        stats.finished_at = self.clock()
        if stats.examined:
            logger.tree(f"{stats.name.title()} Sweep Complete", [
                ("Examined", str(stats.examined)),
                ("Acted", str(stats.acted)),
                ("Skipped", str(stats.skipped)),
                ("Failed", str(stats.failed)),
            ], emoji="🧹")
        return stats


__all__ = ["LifecycleService", "CommandResult", "SweepStats"]
