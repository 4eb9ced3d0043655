"""
Forum Steward - Async Utilities
===============================

Utilities for handling async operations with proper error logging.
Every external call made by the lifecycle engine goes through attempt(),
so a failing or hung Discord call is one logged result instead of an
exception that aborts a sweep.

Usage:
    from src.utils.async_utils import attempt

    result = await attempt(
        "Lock Thread",
        gateway.set_locked(thread_id, True),
        timeout=10,
        context="Lock Sweep",
    )
    if not result.ok:
        ...

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
from dataclasses import dataclass
from typing import Coroutine, Any, Optional

from src.core.constants import LOG_TRUNCATE_LENGTH
from src.core.logger import logger


# =============================================================================
# Attempt Result
# =============================================================================

@dataclass
class AttemptResult:
    """
    Outcome of a wrapped async operation.

    Attributes:
        ok: True if the coroutine finished without raising.
        value: Return value of the coroutine when ok.
        error: Exception raised (or TimeoutError) when not ok.
        timed_out: True if the operation hit its timeout.
    """

    ok: bool
    value: Any = None
    error: Optional[BaseException] = None
    timed_out: bool = False

    def __bool__(self) -> bool:
        return self.ok


async def attempt(
    name: str,
    coro: Coroutine[Any, Any, Any],
    *,
    timeout: Optional[float] = None,
    context: Optional[str] = None,
) -> AttemptResult:
    """
    Run a coroutine with a bounded timeout, never raising.

    DESIGN:
        A timeout is handled exactly like any other failure: logged and
        returned as a failed result. Only CancelledError propagates so
        shutdown still works.

    Args:
        name: Name of the operation for logging.
        coro: The coroutine to run.
        timeout: Seconds before giving up (None for no bound).
        context: Optional context string for error logs (e.g., "Stale Sweep").

    Returns:
        AttemptResult describing the outcome.
    """
    try:
        if timeout is None:
            value = await coro
        else:
            value = await asyncio.wait_for(coro, timeout=timeout)
        return AttemptResult(ok=True, value=value)
    except asyncio.CancelledError:
        raise
    except asyncio.TimeoutError as e:
        details = [
            ("Operation", name),
            ("Timeout", f"{timeout}s"),
        ]
        if context:
            details.insert(0, ("Context", context))
        logger.warning("Async Operation Timed Out", details)
        return AttemptResult(ok=False, error=e, timed_out=True)
    except Exception as e:
        details = [
            ("Operation", name),
            ("Error Type", type(e).__name__),
            ("Error", str(e)[:LOG_TRUNCATE_LENGTH]),
        ]
        if context:
            details.insert(0, ("Context", context))
        logger.warning("Async Operation Failed", details)
        return AttemptResult(ok=False, error=e)


# =============================================================================
# Safe Background Tasks
# =============================================================================

def create_safe_task(
    coro: Coroutine[Any, Any, Any],
    name: str = "Background Task",
) -> asyncio.Task:
    """
    Create a background task with automatic error logging.

    Unlike raw asyncio.create_task(), this catches and logs any exceptions
    instead of letting them silently disappear.

    Args:
        coro: The coroutine to run as a background task.
        name: Name for logging purposes.

    Returns:
        The created asyncio.Task.
    """
    async def wrapped():
        try:
            await coro
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error("Background Task Failed", [
                ("Task", name),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:200]),
            ])

    return asyncio.create_task(wrapped(), name=name)


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "AttemptResult",
    "attempt",
    "create_safe_task",
]
