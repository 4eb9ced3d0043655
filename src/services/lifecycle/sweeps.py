"""
Forum Steward - Lifecycle Sweeps
================================

Periodic passes over the registry: fire due resolve-locks, warn idle
threads, close warned threads that stayed idle.

DESIGN:
    Rows are processed one at a time and each row is isolated: a failed
    or timed-out Discord call is logged and the pass moves on. Store
    errors are not caught here; they propagate to the scheduler.

    Lock sweep claims each row (conditional delete) before acting. A
    /cancel that lands first wins; one that lands after the claim loses.
    The row is gone whether or not the lock succeeds, so a broken thread
    is never retried forever.

    Stale sweep closes first, then warns. Both windows are measured from
    max(created_at, last_renewed_at), and a warned thread is only closed
    once the grace period has also passed since its warning, however long
    it sat idle before it was first swept.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import TYPE_CHECKING

from src.core.constants import (
    ACTION_LOCK,
    ACTION_STALE_WARNING,
    ACTION_AUTO_CLOSE,
    SECONDS_PER_DAY,
)
from src.core.database.models import GuildSettings, PendingLockRecord, TrackedThreadRecord
from src.core.logger import logger

from .embeds import (
    build_lock_notice_embed,
    build_stale_warning_embed,
    build_auto_close_embed,
)
from .gateway import OutgoingMessage, merge_tags

if TYPE_CHECKING:
    from .service import LifecycleService, SweepStats


class SweepsMixin:
    """Mixin for the resolve-lock and stale sweeps."""

    # =========================================================================
    # Resolve-Lock Sweep
    # =========================================================================

    async def run_lock_sweep(self: "LifecycleService") -> "SweepStats":
        """Fire every pending lock whose time has arrived."""
        stats = self._new_stats("lock")
        now = self.clock()

        for row in self.db.due_pending_locks(now):
            stats.examined += 1

            settings = self.db.get_guild_settings(row["guild_id"])
            if settings is None:
                # Left in place until the guild is configured
                logger.warning("Pending Lock Skipped", [
                    ("Thread ID", str(row["thread_id"])),
                    ("Guild ID", str(row["guild_id"])),
                    ("Reason", "Guild not configured"),
                ])
                stats.skipped += 1
                continue

            if not self.db.delete_pending_lock(row["thread_id"], due_before=now):
                # Cancelled or re-armed since the read
                stats.skipped += 1
                continue

            if await self._fire_lock(row, settings):
                stats.acted += 1
            else:
                stats.failed += 1

        return self._finish_stats(stats)

    async def _fire_lock(
        self: "LifecycleService",
        row: PendingLockRecord,
        settings: GuildSettings,
    ) -> bool:
        """Tag, announce and lock one resolved thread."""
        thread_id = row["thread_id"]
        context = "Lock Sweep"

        fetched = await self._call("Fetch Thread", self.gateway.fetch_thread(thread_id), context)
        if not fetched.ok:
            return False
        thread = fetched.value
        if thread is None:
            logger.info("Pending Lock Dropped", [
                ("Thread ID", str(thread_id)),
                ("Reason", "Thread no longer exists"),
            ])
            self.db.delete_tracked_thread(thread_id)
            return False

        tags = merge_tags(
            thread.applied_tag_ids,
            add=[settings.resolved_tag_id],
            remove=[settings.unanswered_tag_id] if settings.unanswered_tag_id else [],
        )
        if tags != thread.applied_tag_ids:
            await self._call("Apply Resolved Tag", self.gateway.set_tags(thread_id, tags), context)

        await self._call(
            "Send Lock Notice",
            self.gateway.send_message(thread_id, OutgoingMessage(embed=build_lock_notice_embed())),
            context,
        )

        locked = await self._call("Lock Thread", self.gateway.set_locked(thread_id, True), context)

        # A resolved thread no longer needs stale tracking
        self.db.delete_tracked_thread(thread_id)

        if not locked.ok:
            return False

        self.audit.record(
            guild_id=row["guild_id"],
            action=ACTION_LOCK,
            details="Resolve timer fired",
            thread_id=thread_id,
        )
        return True

    # =========================================================================
    # Stale Sweep
    # =========================================================================

    async def run_stale_sweep(self: "LifecycleService") -> "SweepStats":
        """Close warned threads that stayed idle, then warn newly idle ones."""
        stats = self._new_stats("stale")
        now = self.clock()

        close_rows = self.db.threads_needing_close(
            now,
            self.config.stale_close_seconds,
            grace=self.config.stale_grace_seconds,
        )
        for row in close_rows:
            stats.examined += 1
            settings = self._settings_for_row(row)
            if settings is None:
                stats.skipped += 1
                continue
            outcome = await self._close_stale(row, settings)
            self._count(stats, outcome)

        for row in self.db.threads_needing_warning(now, self.config.stale_warning_seconds):
            stats.examined += 1
            settings = self._settings_for_row(row)
            if settings is None:
                stats.skipped += 1
                continue
            outcome = await self._warn_stale(row, settings)
            self._count(stats, outcome)

        return self._finish_stats(stats)

    def _settings_for_row(self: "LifecycleService", row: TrackedThreadRecord):
        settings = self.db.get_guild_settings(row["guild_id"])
        if settings is None:
            logger.warning("Tracked Thread Skipped", [
                ("Thread ID", str(row["thread_id"])),
                ("Guild ID", str(row["guild_id"])),
                ("Reason", "Guild not configured"),
            ])
        return settings

    async def _warn_stale(
        self: "LifecycleService",
        row: TrackedThreadRecord,
        settings: GuildSettings,
    ) -> str:
        """
        Post the inactivity warning for one thread.

        Returns:
            "acted", "skipped" (row dropped as stale bookkeeping) or "failed".
        """
        thread_id = row["thread_id"]
        context = "Stale Warning"

        fetched = await self._call("Fetch Thread", self.gateway.fetch_thread(thread_id), context)
        if not fetched.ok:
            return "failed"
        thread = fetched.value

        closed_tags = {settings.resolved_tag_id, settings.duplicate_tag_id}
        if (
            thread is None
            or thread.locked
            or thread.archived
            or closed_tags & thread.applied_tag_ids
        ):
            self.db.delete_tracked_thread(thread_id)
            logger.info("Tracked Thread Dropped", [
                ("Thread ID", str(thread_id)),
                ("Reason", "Gone" if thread is None else "Already closed or resolved"),
            ])
            return "skipped"

        grace_days = self.config.stale_grace_seconds // SECONDS_PER_DAY
        message = OutgoingMessage(
            content=f"<@{thread.owner_id}>",
            embed=build_stale_warning_embed(thread.owner_id, self._idle_days(row), grace_days),
            view=self.view_factory(thread_id) if self.view_factory else None,
        )
        sent = await self._call("Send Stale Warning", self.gateway.send_message(thread_id, message), context)

        # Flagged even if delivery failed
        self.db.set_stale_warning_sent(thread_id, True, warned_at=self.clock())
        self.audit.record(
            guild_id=row["guild_id"],
            action=ACTION_STALE_WARNING,
            details=f"Idle {self._idle_days(row)}d" + ("" if sent.ok else ", warning not delivered"),
            thread_id=thread_id,
            message_id=sent.value if sent.ok else None,
        )
        return "acted" if sent.ok else "failed"

    async def _close_stale(
        self: "LifecycleService",
        row: TrackedThreadRecord,
        settings: GuildSettings,
    ) -> str:
        """Lock one warned thread that stayed idle through the close window."""
        thread_id = row["thread_id"]
        context = "Stale Close"

        fetched = await self._call("Fetch Thread", self.gateway.fetch_thread(thread_id), context)
        if not fetched.ok:
            return "failed"
        thread = fetched.value

        if thread is None or thread.locked or thread.archived:
            self.db.delete_tracked_thread(thread_id)
            return "skipped"

        await self._call(
            "Send Close Notice",
            self.gateway.send_message(
                thread_id,
                OutgoingMessage(embed=build_auto_close_embed(self._idle_days(row))),
            ),
            context,
        )
        locked = await self._call("Lock Thread", self.gateway.set_locked(thread_id, True), context)

        self.db.delete_tracked_thread(thread_id)
        self.db.delete_pending_lock(thread_id)

        if not locked.ok:
            return "failed"

        self.audit.record(
            guild_id=row["guild_id"],
            action=ACTION_AUTO_CLOSE,
            details=f"Idle {self._idle_days(row)}d",
            thread_id=thread_id,
        )
        return "acted"

    # =========================================================================
    # Helpers
    # =========================================================================

    def _idle_days(self: "LifecycleService", row: TrackedThreadRecord) -> int:
        since = max(row["created_at"], row["last_renewed_at"] or 0)
        return int((self.clock() - since) // SECONDS_PER_DAY)

    @staticmethod
    def _count(stats: "SweepStats", outcome: str) -> None:
        if outcome == "acted":
            stats.acted += 1
        elif outcome == "skipped":
            stats.skipped += 1
        else:
            stats.failed += 1


__all__ = ["SweepsMixin"]
