"""
Forum Steward - Lifecycle Commands
==================================

Explicit user intents: resolve, cancel, keep-open, duplicate, and the
per-thread reference link.

DESIGN:
    Permission checks happen in the command cogs. Here every intent is
    validated against the guild's settings and either mutates state and
    reports success, or reports a specific reason and changes nothing.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import TYPE_CHECKING, Optional
from urllib.parse import urlparse

from src.core.constants import (
    ACTION_RESOLVED,
    ACTION_CANCEL,
    ACTION_THREAD_RENEWED,
    ACTION_DUPLICATE,
    ACTION_LINK_SET,
    ACTION_LINK_REMOVED,
    MAX_RESOLVE_DELAY_MINUTES,
    SECONDS_PER_MINUTE,
)
from src.core.logger import logger
from src.utils.time_format import format_duration

from .embeds import build_duplicate_embed
from .gateway import OutgoingMessage

if TYPE_CHECKING:
    from .service import LifecycleService, CommandResult


NOT_CONFIGURED = "This server hasn't been set up yet. An administrator needs to run **/setup**."


def is_valid_link(url: str) -> bool:
    """Accept absolute http(s) URLs only."""
    parsed = urlparse(url.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class CommandsMixin:
    """Mixin for resolve / cancel / duplicate / link intents."""

    # =========================================================================
    # Resolve
    # =========================================================================

    def resolve(
        self: "LifecycleService",
        thread_id: int,
        guild_id: int,
        delay_minutes: Optional[int] = None,
        actor_id: Optional[int] = None,
        actor_name: Optional[str] = None,
    ) -> "CommandResult":
        """
        Arm (or re-arm) the resolve timer for a thread.

        Issuing it again replaces the fire time; there is only ever one
        pending lock per thread.
        """
        settings = self.db.get_guild_settings(guild_id)
        if settings is None:
            return self._result(False, NOT_CONFIGURED)

        if delay_minutes is None:
            delay_minutes = self.config.resolve_delay_minutes
        delay_minutes = max(0, min(delay_minutes, MAX_RESOLVE_DELAY_MINUTES))

        fire_at = self.clock() + delay_minutes * SECONDS_PER_MINUTE
        self.db.upsert_pending_lock(thread_id, guild_id, fire_at)

        self.audit.record(
            guild_id=guild_id,
            action=ACTION_RESOLVED,
            details=f"Lock in {format_duration(delay_minutes)}",
            actor_id=actor_id,
            actor_name=actor_name,
            command_text="/resolved",
            thread_id=thread_id,
        )
        return self._result(
            True,
            f"**Thread marked as Resolved.** It will be tagged and locked in {format_duration(delay_minutes)}.",
            ACTION_RESOLVED,
            fire_at=fire_at,
            delay_minutes=delay_minutes,
        )

    # =========================================================================
    # Cancel / Keep Open
    # =========================================================================

    def cancel(
        self: "LifecycleService",
        thread_id: int,
        guild_id: int,
        actor_id: Optional[int] = None,
        actor_name: Optional[str] = None,
    ) -> "CommandResult":
        """
        Cancel the one thing pending on a thread.

        A pending lock is cancelled first. Only if there is none does a
        warned thread get its stale clock renewed.
        """
        if self.db.get_guild_settings(guild_id) is None:
            return self._result(False, NOT_CONFIGURED)

        if self.db.delete_pending_lock(thread_id):
            self.audit.record(
                guild_id=guild_id,
                action=ACTION_CANCEL,
                details="Resolve timer cancelled",
                actor_id=actor_id,
                actor_name=actor_name,
                command_text="/cancel",
                thread_id=thread_id,
            )
            return self._result(True, "Resolve timer cancelled. This thread will stay open.", ACTION_CANCEL)

        if self._renew_if_warned(thread_id, guild_id, actor_id, actor_name, "/cancel"):
            return self._result(
                True, "✅ **Closure cancelled.** This thread will stay open for now!", ACTION_THREAD_RENEWED
            )

        return self._result(False, "There's nothing to cancel on this thread.")

    async def keep_open(
        self: "LifecycleService",
        thread_id: int,
        guild_id: int,
        actor_id: int,
        actor_name: Optional[str] = None,
    ) -> "CommandResult":
        """Renew a warned thread from its Keep Post Open button (owner only)."""
        if self.db.get_guild_settings(guild_id) is None:
            return self._result(False, NOT_CONFIGURED)

        fetched = await self._call("Fetch Thread", self.gateway.fetch_thread(thread_id), "Keep Open")
        if not fetched.ok or fetched.value is None:
            return self._result(False, "I couldn't find this thread.")

        if fetched.value.owner_id != actor_id:
            return self._result(False, "Only the person who made this post can keep it open!")

        if self._renew_if_warned(thread_id, guild_id, actor_id, actor_name, "keep_open"):
            return self._result(
                True, "✅ **Closure cancelled.** This thread will stay open for now!", ACTION_THREAD_RENEWED
            )
        return self._result(False, "This thread isn't scheduled to close.")

    def _renew_if_warned(
        self: "LifecycleService",
        thread_id: int,
        guild_id: int,
        actor_id: Optional[int],
        actor_name: Optional[str],
        command_text: str,
    ) -> bool:
        tracked = self.db.get_tracked_thread(thread_id)
        if tracked is None or not tracked["stale_warning_sent"]:
            return False

        self.db.set_stale_warning_sent(thread_id, False, renewed_at=self.clock())
        self.audit.record(
            guild_id=guild_id,
            action=ACTION_THREAD_RENEWED,
            details="Stale warning cancelled",
            actor_id=actor_id,
            actor_name=actor_name,
            command_text=command_text,
            thread_id=thread_id,
        )
        return True

    # =========================================================================
    # Duplicate
    # =========================================================================

    async def duplicate(
        self: "LifecycleService",
        thread_id: int,
        guild_id: int,
        original_link: str,
        actor_id: Optional[int] = None,
        actor_name: Optional[str] = None,
    ) -> "CommandResult":
        """
        Close a thread as a duplicate right away.

        The thread is locked, then its tags are replaced by the duplicate
        tag alone and a redirect is posted. Any pending lock or stale tracking for
        the thread is dropped since the thread is now terminal.
        """
        settings = self.db.get_guild_settings(guild_id)
        if settings is None:
            return self._result(False, NOT_CONFIGURED)

        if not is_valid_link(original_link):
            return self._result(False, "Please provide a valid link to the original post.")

        context = "Duplicate"
        fetched = await self._call("Fetch Thread", self.gateway.fetch_thread(thread_id), context)
        if not fetched.ok or fetched.value is None:
            return self._result(False, "I couldn't find this thread.")
        thread = fetched.value
        if thread.parent_id != settings.forum_channel_id:
            return self._result(False, "This command only works in the help forum.")

        # A refused lock leaves the thread untouched
        locked = await self._call("Lock Thread", self.gateway.set_locked(thread_id, True), context)
        if not locked.ok:
            return self._result(False, "I couldn't lock this thread. Check my Manage Threads permission.")

        await self._call(
            "Apply Duplicate Tag",
            self.gateway.set_tags(thread_id, frozenset({settings.duplicate_tag_id})),
            context,
        )
        sent = await self._call(
            "Send Duplicate Notice",
            self.gateway.send_message(thread_id, OutgoingMessage(embed=build_duplicate_embed(original_link))),
            context,
        )

        self.db.delete_pending_lock(thread_id)
        self.db.delete_tracked_thread(thread_id)

        self.audit.record(
            guild_id=guild_id,
            action=ACTION_DUPLICATE,
            details=original_link,
            actor_id=actor_id,
            actor_name=actor_name,
            command_text="/duplicate",
            thread_id=thread_id,
            message_id=sent.value if sent.ok else None,
        )
        return self._result(True, "Thread closed as a duplicate.", ACTION_DUPLICATE)

    # =========================================================================
    # Thread Links
    # =========================================================================

    def set_link(
        self: "LifecycleService",
        thread_id: int,
        guild_id: int,
        url: str,
        actor_id: int,
        actor_name: Optional[str] = None,
    ) -> "CommandResult":
        """Attach a reference link to a thread, replacing any previous one."""
        if self.db.get_guild_settings(guild_id) is None:
            return self._result(False, NOT_CONFIGURED)
        if not is_valid_link(url):
            return self._result(False, "Please provide a valid http(s) link.")

        self.db.set_thread_link(thread_id, guild_id, url.strip(), actor_id)
        self.audit.record(
            guild_id=guild_id,
            action=ACTION_LINK_SET,
            details=url.strip(),
            actor_id=actor_id,
            actor_name=actor_name,
            command_text="/link set",
            thread_id=thread_id,
        )
        return self._result(True, "Link saved for this thread.", ACTION_LINK_SET)

    def remove_link(
        self: "LifecycleService",
        thread_id: int,
        guild_id: int,
        actor_id: int,
        actor_name: Optional[str] = None,
    ) -> "CommandResult":
        if self.db.get_guild_settings(guild_id) is None:
            return self._result(False, NOT_CONFIGURED)
        if not self.db.delete_thread_link(thread_id):
            return self._result(False, "This thread has no link.")

        self.audit.record(
            guild_id=guild_id,
            action=ACTION_LINK_REMOVED,
            actor_id=actor_id,
            actor_name=actor_name,
            command_text="/link remove",
            thread_id=thread_id,
        )
        logger.debug("Thread Link Removed", [("Thread ID", str(thread_id))])
        return self._result(True, "Link removed from this thread.", ACTION_LINK_REMOVED)


__all__ = ["CommandsMixin", "is_valid_link", "NOT_CONFIGURED"]
