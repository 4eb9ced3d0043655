"""
Forum Steward - Thread Gateway
==============================

Platform-neutral view of forum threads and the Discord implementation
the lifecycle engine talks to.

DESIGN:
    The engine only ever sees ThreadSnapshot values and calls the five
    ThreadGateway coroutines. Every call may raise; the engine wraps each
    one in attempt() with a bounded timeout. fetch_thread returns None
    when the thread is gone (deleted, or hidden from the bot), which the
    sweeps treat as a terminal state for the row.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, FrozenSet, Iterable, List, Optional

import discord

from src.core.constants import MAX_FORUM_TAGS
from src.core.logger import logger
from src.utils.discord_rate_limit import log_http_error, with_rate_limit_retry

if TYPE_CHECKING:
    from src.bot import StewardBot


# =============================================================================
# Exceptions
# =============================================================================

class GatewayError(Exception):
    """A Discord call the engine depends on could not be completed."""


class ThreadNotFound(GatewayError):
    """The thread no longer exists or the bot cannot see it."""

    def __init__(self, thread_id: int) -> None:
        super().__init__(f"Thread {thread_id} not found")
        self.thread_id = thread_id


# =============================================================================
# Value Types
# =============================================================================

@dataclass(frozen=True)
class ThreadSnapshot:
    """Point-in-time state of a forum thread."""

    id: int
    guild_id: int
    parent_id: int
    owner_id: int
    applied_tag_ids: FrozenSet[int] = frozenset()
    locked: bool = False
    archived: bool = False
    created_at: float = 0.0
    last_activity_at: Optional[float] = None
    name: str = ""

    @property
    def idle_since(self) -> float:
        if self.last_activity_at is None:
            return self.created_at
        return max(self.created_at, self.last_activity_at)


@dataclass
class OutgoingMessage:
    """Message posted into a thread by the engine."""

    content: Optional[str] = None
    embed: Any = None
    view: Any = None


def merge_tags(
    current: Iterable[int],
    add: Iterable[int] = (),
    remove: Iterable[int] = (),
) -> FrozenSet[int]:
    """
    Compute a thread's new tag set.

    Added tags always survive; when the result would exceed Discord's
    per-thread limit, the remaining tags are kept in ascending id order.
    """
    added = list(dict.fromkeys(t for t in add if t))
    removed = set(remove) | set(added)
    rest = sorted(t for t in current if t not in removed)
    keep = max(MAX_FORUM_TAGS - len(added), 0)
    return frozenset(added[:MAX_FORUM_TAGS]) | frozenset(rest[:keep])


# =============================================================================
# Gateway Interface
# =============================================================================

class ThreadGateway(ABC):
    """Operations the lifecycle engine performs against the chat platform."""

    @abstractmethod
    async def fetch_thread(self, thread_id: int) -> Optional[ThreadSnapshot]:
        """Return the thread, or None if it no longer exists."""

    @abstractmethod
    async def set_tags(self, thread_id: int, tag_ids: Iterable[int]) -> None:
        """Replace the thread's applied tags."""

    @abstractmethod
    async def set_locked(self, thread_id: int, locked: bool) -> None:
        """Lock or unlock the thread."""

    @abstractmethod
    async def send_message(self, thread_id: int, message: OutgoingMessage) -> Optional[int]:
        """Post a message into the thread, returning its id."""

    @abstractmethod
    async def fetch_forum_active_threads(self, forum_id: int) -> List[ThreadSnapshot]:
        """List the forum's active (unarchived) threads."""


# =============================================================================
# Discord Implementation
# =============================================================================

def snapshot_from_thread(thread: discord.Thread) -> ThreadSnapshot:
    """Build a ThreadSnapshot from a discord.py Thread."""
    created = thread.created_at or discord.utils.snowflake_time(thread.id)
    last_activity = None
    if thread.last_message_id:
        last_activity = discord.utils.snowflake_time(thread.last_message_id).timestamp()

    return ThreadSnapshot(
        id=thread.id,
        guild_id=thread.guild.id,
        parent_id=thread.parent_id,
        owner_id=thread.owner_id,
        applied_tag_ids=frozenset(tag.id for tag in thread.applied_tags),
        locked=thread.locked,
        archived=thread.archived,
        created_at=created.timestamp(),
        last_activity_at=last_activity,
        name=thread.name,
    )


class DiscordGateway(ThreadGateway):
    """
    ThreadGateway backed by a discord.py client.

    Threads are read from the cache first and fetched over HTTP on a miss.
    Writes retry on rate limits and 5xx errors; other HTTP errors are
    logged with log_http_error and re-raised for the engine to record.
    """

    def __init__(self, bot: "StewardBot") -> None:
        self.bot = bot

    async def _get_thread(self, thread_id: int) -> Optional[discord.Thread]:
        channel = self.bot.get_channel(thread_id)
        if channel is None:
            try:
                channel = await self.bot.fetch_channel(thread_id)
            except (discord.NotFound, discord.Forbidden):
                return None
        if not isinstance(channel, discord.Thread):
            return None
        return channel

    async def _require_thread(self, thread_id: int) -> discord.Thread:
        thread = await self._get_thread(thread_id)
        if thread is None:
            raise ThreadNotFound(thread_id)
        return thread

    async def fetch_thread(self, thread_id: int) -> Optional[ThreadSnapshot]:
        thread = await self._get_thread(thread_id)
        return snapshot_from_thread(thread) if thread else None

    @with_rate_limit_retry(max_retries=2)
    async def set_tags(self, thread_id: int, tag_ids: Iterable[int]) -> None:
        thread = await self._require_thread(thread_id)
        forum = thread.parent
        if not isinstance(forum, discord.ForumChannel):
            raise GatewayError(f"Thread {thread_id} is not in a forum")

        tags = [tag for tag in (forum.get_tag(tid) for tid in tag_ids) if tag is not None]
        try:
            # Archived threads reject edits unless they are unarchived in the same call
            if thread.archived:
                await thread.edit(applied_tags=tags, archived=False)
            else:
                await thread.edit(applied_tags=tags)
        except discord.HTTPException as e:
            log_http_error(e, "Set Thread Tags", [("Thread ID", str(thread_id))])
            raise

    @with_rate_limit_retry(max_retries=2)
    async def set_locked(self, thread_id: int, locked: bool) -> None:
        thread = await self._require_thread(thread_id)
        try:
            await thread.edit(locked=locked)
        except discord.HTTPException as e:
            log_http_error(e, "Lock Thread" if locked else "Unlock Thread", [
                ("Thread ID", str(thread_id)),
            ])
            raise

    @with_rate_limit_retry(max_retries=2)
    async def send_message(self, thread_id: int, message: OutgoingMessage) -> Optional[int]:
        thread = await self._require_thread(thread_id)
        kwargs = {"allowed_mentions": discord.AllowedMentions(users=True, roles=False, everyone=False)}
        if message.content is not None:
            kwargs["content"] = message.content
        if message.embed is not None:
            kwargs["embed"] = message.embed
        if message.view is not None:
            kwargs["view"] = message.view
        try:
            sent = await thread.send(**kwargs)
        except discord.HTTPException as e:
            log_http_error(e, "Send Thread Message", [("Thread ID", str(thread_id))])
            raise
        return sent.id

    async def fetch_forum_active_threads(self, forum_id: int) -> List[ThreadSnapshot]:
        forum = self.bot.get_channel(forum_id)
        if forum is None:
            try:
                forum = await self.bot.fetch_channel(forum_id)
            except discord.NotFound:
                raise GatewayError(f"Forum {forum_id} not found")
        if not isinstance(forum, discord.ForumChannel):
            raise GatewayError(f"Channel {forum_id} is not a forum")

        active = await forum.guild.active_threads()
        threads = [t for t in active if t.parent_id == forum_id]

        logger.debug("Forum Active Threads Fetched", [
            ("Forum", f"{forum.name} ({forum_id})"),
            ("Threads", str(len(threads))),
        ])
        return [snapshot_from_thread(t) for t in threads]


__all__ = [
    "GatewayError",
    "ThreadNotFound",
    "ThreadSnapshot",
    "OutgoingMessage",
    "ThreadGateway",
    "DiscordGateway",
    "merge_tags",
    "snapshot_from_thread",
]
