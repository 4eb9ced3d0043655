"""
Forum Steward - Lifecycle Events
================================

Reactions to platform events: new threads, replies, and the startup
backfill of threads created while the bot was offline.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import TYPE_CHECKING, Iterable, Optional

from src.core.constants import (
    ACTION_GREET,
    ACTION_ANSWERED,
    ACTION_THREAD_RENEWED,
)
from src.core.logger import logger

from .embeds import build_welcome_embed
from .gateway import OutgoingMessage, ThreadSnapshot, merge_tags

if TYPE_CHECKING:
    from .service import LifecycleService


class EventsMixin:
    """Mixin for thread-created, message-posted and backfill handling."""

    # =========================================================================
    # Thread Created
    # =========================================================================

    async def thread_created(self: "LifecycleService", thread: ThreadSnapshot) -> bool:
        """
        Start tracking a new forum thread and greet its owner.

        DESIGN:
            Tracking is insert-if-absent. The welcome is only posted when
            the row is new, so a replayed create event does not greet twice.

        Returns:
            True if the thread was greeted.
        """
        settings = self.db.get_guild_settings(thread.guild_id)
        if settings is None or thread.parent_id != settings.forum_channel_id:
            return False

        inserted = self.db.upsert_tracked_thread(thread.id, thread.guild_id, thread.created_at)
        if not inserted:
            logger.debug("Thread Already Tracked", [("Thread ID", str(thread.id))])
            return False

        context = "Thread Created"

        unanswered = settings.unanswered_tag_id
        if unanswered and unanswered not in thread.applied_tag_ids:
            tags = merge_tags(thread.applied_tag_ids, add=[unanswered])
            await self._call("Apply Unanswered Tag", self.gateway.set_tags(thread.id, tags), context)

        sent = await self._call(
            "Send Welcome",
            self.gateway.send_message(
                thread.id,
                OutgoingMessage(content=f"Welcome <@{thread.owner_id}>!", embed=build_welcome_embed()),
            ),
            context,
        )

        self.audit.record(
            guild_id=thread.guild_id,
            action=ACTION_GREET,
            details=thread.name or None,
            actor_id=thread.owner_id,
            thread_id=thread.id,
            message_id=sent.value if sent.ok else None,
        )
        return True

    # =========================================================================
    # Message Posted
    # =========================================================================

    async def message_posted(
        self: "LifecycleService",
        thread_id: int,
        guild_id: int,
        author_id: int,
        is_owner: bool,
        message_id: Optional[int] = None,
    ) -> None:
        """
        React to a human reply in a tracked thread.

        A non-owner reply clears the unanswered tag; an owner reply resets
        the stale clock whether or not the tag is present.
        """
        tracked = self.db.get_tracked_thread(thread_id)
        if tracked is None:
            return

        settings = self.db.get_guild_settings(guild_id)
        if settings is None:
            return

        if is_owner:
            was_warned = bool(tracked["stale_warning_sent"])
            self.db.set_stale_warning_sent(thread_id, False, renewed_at=self.clock())
            if was_warned:
                self.audit.record(
                    guild_id=guild_id,
                    action=ACTION_THREAD_RENEWED,
                    details="Owner replied",
                    actor_id=author_id,
                    thread_id=thread_id,
                    message_id=message_id,
                )
            return

        if settings.unanswered_tag_id:
            await self._clear_unanswered(thread_id, guild_id, settings.unanswered_tag_id, author_id, message_id)

    async def _clear_unanswered(
        self: "LifecycleService",
        thread_id: int,
        guild_id: int,
        unanswered_tag_id: int,
        author_id: int,
        message_id: Optional[int],
    ) -> None:
        # One removal per thread at a time; concurrent replies are no-ops
        if thread_id in self._tag_claims:
            return
        self._tag_claims.add(thread_id)
        try:
            context = "Unanswered Tag"
            fetched = await self._call("Fetch Thread", self.gateway.fetch_thread(thread_id), context)
            thread = fetched.value if fetched.ok else None
            if thread is None or unanswered_tag_id not in thread.applied_tag_ids:
                return

            tags = merge_tags(thread.applied_tag_ids, remove=[unanswered_tag_id])
            result = await self._call("Remove Unanswered Tag", self.gateway.set_tags(thread_id, tags), context)
            if result.ok:
                self.audit.record(
                    guild_id=guild_id,
                    action=ACTION_ANSWERED,
                    details="First reply from another member",
                    actor_id=author_id,
                    thread_id=thread_id,
                    message_id=message_id,
                )
        finally:
            self._tag_claims.discard(thread_id)

    # =========================================================================
    # Startup Backfill
    # =========================================================================

    async def backfill(self: "LifecycleService", guild_ids: Optional[Iterable[int]] = None) -> int:
        """
        Track open threads in every configured forum.

        Existing rows are untouched. New rows take the thread's last
        message as their renewal time so a busy old thread is not warned
        straight away. Failures are isolated per guild.

        Returns:
            Number of threads newly tracked.
        """
        total = 0
        ids = list(guild_ids) if guild_ids is not None else self.db.get_configured_guild_ids()

        for guild_id in ids:
            settings = self.db.get_guild_settings(guild_id)
            if settings is None:
                continue

            fetched = await self._call(
                "Fetch Forum Threads",
                self.gateway.fetch_forum_active_threads(settings.forum_channel_id),
                f"Backfill {guild_id}",
            )
            if not fetched.ok:
                continue

            closed_tags = {settings.resolved_tag_id, settings.duplicate_tag_id}
            added = 0
            for thread in fetched.value:
                if thread.locked or thread.archived or closed_tags & thread.applied_tag_ids:
                    continue
                if not self.db.upsert_tracked_thread(thread.id, guild_id, thread.created_at):
                    continue
                added += 1
                if thread.idle_since > thread.created_at:
                    self.db.set_stale_warning_sent(thread.id, False, renewed_at=thread.idle_since)

            total += added
            logger.tree("Forum Backfilled", [
                ("Guild", f"{settings.guild_name} ({guild_id})"),
                ("Active Threads", str(len(fetched.value))),
                ("Newly Tracked", str(added)),
            ], emoji="📥")

        return total


__all__ = ["EventsMixin"]
