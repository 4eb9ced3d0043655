"""
Forum Steward - Lifecycle Scheduler
===================================

Background loops driving the lifecycle sweeps.

DESIGN:
    Two independent loops on one event loop:
    - Lock sweep every LOCK_SWEEP_INTERVAL seconds
    - Stale sweep immediately at start, then every STALE_SWEEP_INTERVAL

    A failed pass is logged and the loop waits SCHEDULER_RETRY_DELAY (or
    the normal interval if shorter) before trying again; nothing short of
    stop() ends a loop.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
from typing import Awaitable, Callable, Dict, Optional

from src.core.constants import SCHEDULER_RETRY_DELAY, SHUTDOWN_TIMEOUT
from src.core.logger import logger
from src.utils.async_utils import create_safe_task

from .service import LifecycleService, SweepStats


class LifecycleScheduler:
    """
    Runs the resolve-lock and stale sweeps on their intervals.

    Attributes:
        service: The lifecycle engine.
        running: Whether the loops are active.
        last_runs: Most recent SweepStats per loop name.
        last_errors: Most recent error text per loop name.
    """

    def __init__(self, service: LifecycleService) -> None:
        self.service = service
        self.config = service.config
        self.running: bool = False
        self.last_runs: Dict[str, SweepStats] = {}
        self.last_errors: Dict[str, str] = {}
        self._tasks: Dict[str, asyncio.Task] = {}

    # =========================================================================
    # Lifecycle Management
    # =========================================================================

    async def start(self) -> None:
        """Start both sweep loops, replacing any that are already running."""
        await self._cancel_tasks()
        self.running = True

        self._tasks["lock"] = create_safe_task(
            self._loop("lock", self.service.run_lock_sweep, self.config.lock_sweep_interval),
            "Lock Sweep Loop",
        )
        self._tasks["stale"] = create_safe_task(
            self._loop("stale", self.service.run_stale_sweep, self.config.stale_sweep_interval),
            "Stale Sweep Loop",
        )

        logger.tree("Lifecycle Scheduler Started", [
            ("Lock Sweep", f"every {self.config.lock_sweep_interval}s"),
            ("Stale Sweep", f"every {self.config.stale_sweep_interval}s"),
            ("Status", "Running"),
        ], emoji="⏰")

    async def stop(self) -> None:
        """Stop both loops and wait for them to finish."""
        self.running = False
        await self._cancel_tasks()
        logger.info("Lifecycle Scheduler Stopped")

    async def _cancel_tasks(self) -> None:
        tasks = [t for t in self._tasks.values() if not t.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.wait(tasks, timeout=SHUTDOWN_TIMEOUT)
        self._tasks.clear()

    # =========================================================================
    # Scheduler Loop
    # =========================================================================

    async def _loop(
        self,
        name: str,
        sweep: Callable[[], Awaitable[SweepStats]],
        interval: float,
    ) -> None:
        while self.running:
            delay = interval
            try:
                self.last_runs[name] = await sweep()
                self.last_errors.pop(name, None)
            except asyncio.CancelledError:
                break
            except Exception as e:
                self.last_errors[name] = f"{type(e).__name__}: {str(e)[:100]}"
                logger.error("Lifecycle Sweep Error", [
                    ("Sweep", name),
                    ("Error Type", type(e).__name__),
                    ("Error", str(e)[:100]),
                ])
                delay = min(interval, SCHEDULER_RETRY_DELAY)

            try:
                await asyncio.sleep(delay)
            except asyncio.CancelledError:
                break

    # =========================================================================
    # Status
    # =========================================================================

    def status(self) -> Dict[str, Optional[dict]]:
        """Snapshot of loop state for the health endpoint."""
        return {
            "running": self.running,
            "lock": self.last_runs["lock"].to_dict() if "lock" in self.last_runs else None,
            "stale": self.last_runs["stale"].to_dict() if "stale" in self.last_runs else None,
            "errors": dict(self.last_errors),
        }


__all__ = ["LifecycleScheduler"]
