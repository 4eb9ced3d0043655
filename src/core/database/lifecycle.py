"""
Forum Steward - Thread Lifecycle Mixin
======================================

Pending locks and tracked threads: the persisted state the lifecycle
sweeps operate on.

DESIGN:
    Every operation is a single keyed read or write. Upserts overwrite
    (last write wins) except upsert_tracked_thread, which never replaces
    an existing row so startup backfill and thread-create can both run.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import time
from typing import TYPE_CHECKING, List, Optional

from src.core.database.models import PendingLockRecord, TrackedThreadRecord

if TYPE_CHECKING:
    from src.core.database.manager import DatabaseManager


class LifecycleMixin:
    """Mixin for pending lock and tracked thread operations."""

    # =========================================================================
    # Pending Locks
    # =========================================================================

    def upsert_pending_lock(
        self: "DatabaseManager",
        thread_id: int,
        guild_id: int,
        fire_at: float,
    ) -> None:
        """
        Arm (or re-arm) a thread's resolve timer.

        Args:
            thread_id: Forum thread ID.
            guild_id: Guild ID.
            fire_at: Epoch seconds at which the lock fires.
        """
        self.execute(
            """INSERT OR REPLACE INTO pending_locks
               (thread_id, guild_id, fire_at, created_at)
               VALUES (?, ?, ?, ?)""",
            (thread_id, guild_id, fire_at, time.time())
        )

    def delete_pending_lock(
        self: "DatabaseManager",
        thread_id: int,
        due_before: Optional[float] = None,
    ) -> bool:
        """
        Delete a thread's pending lock.

        Args:
            thread_id: Forum thread ID.
            due_before: When set, only delete if fire_at <= due_before.
                The lock sweep uses this to claim a row it read, so a
                re-armed timer is not fired early.

        Returns:
            True if a row was removed.
        """
        if due_before is None:
            cursor = self.execute(
                "DELETE FROM pending_locks WHERE thread_id = ?",
                (thread_id,)
            )
        else:
            cursor = self.execute(
                "DELETE FROM pending_locks WHERE thread_id = ? AND fire_at <= ?",
                (thread_id, due_before)
            )
        return cursor.rowcount > 0

    def get_pending_lock(self: "DatabaseManager", thread_id: int) -> Optional[PendingLockRecord]:
        row = self.fetchone(
            "SELECT * FROM pending_locks WHERE thread_id = ?",
            (thread_id,)
        )
        return dict(row) if row else None

    def due_pending_locks(self: "DatabaseManager", now: float) -> List[PendingLockRecord]:
        """Get all pending locks whose fire time has arrived."""
        rows = self.fetchall(
            "SELECT * FROM pending_locks WHERE fire_at <= ? ORDER BY fire_at",
            (now,)
        )
        return [dict(row) for row in rows]

    # =========================================================================
    # Tracked Threads
    # =========================================================================

    def upsert_tracked_thread(
        self: "DatabaseManager",
        thread_id: int,
        guild_id: int,
        created_at: float,
    ) -> bool:
        """
        Start tracking a thread unless it is already tracked.

        Returns:
            True if a new row was inserted.
        """
        cursor = self.execute(
            """INSERT OR IGNORE INTO tracked_threads
               (thread_id, guild_id, created_at, stale_warning_sent, last_renewed_at)
               VALUES (?, ?, ?, 0, NULL)""",
            (thread_id, guild_id, created_at)
        )
        return cursor.rowcount > 0

    def get_tracked_thread(self: "DatabaseManager", thread_id: int) -> Optional[TrackedThreadRecord]:
        row = self.fetchone(
            "SELECT * FROM tracked_threads WHERE thread_id = ?",
            (thread_id,)
        )
        return dict(row) if row else None

    def set_stale_warning_sent(
        self: "DatabaseManager",
        thread_id: int,
        sent: bool,
        renewed_at: Optional[float] = None,
        warned_at: Optional[float] = None,
    ) -> bool:
        """
        Flip a thread's warning flag, optionally stamping a renewal.

        Args:
            thread_id: Forum thread ID.
            sent: New value of stale_warning_sent.
            renewed_at: When set, also written to last_renewed_at.
            warned_at: When the warning was posted. Cleared when sent is False.

        Returns:
            True if the thread is tracked.
        """
        stamp = warned_at if sent else None
        if renewed_at is None:
            cursor = self.execute(
                "UPDATE tracked_threads SET stale_warning_sent = ?, warned_at = ? WHERE thread_id = ?",
                (1 if sent else 0, stamp, thread_id)
            )
        else:
            cursor = self.execute(
                """UPDATE tracked_threads
                   SET stale_warning_sent = ?, warned_at = ?, last_renewed_at = ?
                   WHERE thread_id = ?""",
                (1 if sent else 0, stamp, renewed_at, thread_id)
            )
        return cursor.rowcount > 0

    def threads_needing_warning(
        self: "DatabaseManager",
        now: float,
        warning_window: float,
    ) -> List[TrackedThreadRecord]:
        """Get unwarned threads idle for at least warning_window seconds."""
        cutoff = now - warning_window
        rows = self.fetchall(
            """SELECT * FROM tracked_threads
               WHERE stale_warning_sent = 0
               AND created_at <= ?
               AND (last_renewed_at IS NULL OR last_renewed_at <= ?)""",
            (cutoff, cutoff)
        )
        return [dict(row) for row in rows]

    def threads_needing_close(
        self: "DatabaseManager",
        now: float,
        close_window: float,
        grace: float = 0.0,
    ) -> List[TrackedThreadRecord]:
        """
        Get warned threads idle for at least close_window seconds.

        Args:
            now: Current epoch seconds.
            close_window: Idle seconds measured from max(created_at, last_renewed_at).
            grace: Seconds that must also have passed since the warning was
                posted. Rows warned before warned_at existed have no stamp
                and only need the idle window.
        """
        cutoff = now - close_window
        rows = self.fetchall(
            """SELECT * FROM tracked_threads
               WHERE stale_warning_sent = 1
               AND created_at <= ?
               AND (last_renewed_at IS NULL OR last_renewed_at <= ?)
               AND (warned_at IS NULL OR warned_at <= ?)""",
            (cutoff, cutoff, now - grace)
        )
        return [dict(row) for row in rows]

    def delete_tracked_thread(self: "DatabaseManager", thread_id: int) -> bool:
        cursor = self.execute(
            "DELETE FROM tracked_threads WHERE thread_id = ?",
            (thread_id,)
        )
        return cursor.rowcount > 0

    def count_lifecycle_rows(self: "DatabaseManager") -> dict:
        """Row counts for the health endpoint."""
        pending = self.fetchone("SELECT COUNT(*) AS c FROM pending_locks")
        tracked = self.fetchone("SELECT COUNT(*) AS c FROM tracked_threads")
        return {
            "pending_locks": pending["c"] if pending else 0,
            "tracked_threads": tracked["c"] if tracked else 0,
        }
