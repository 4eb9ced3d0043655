"""
Forum Steward - Database Type Definitions
=========================================

TypedDict definitions for database records.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from dataclasses import dataclass, field
from typing import Optional, Set, TypedDict


class PendingLockRecord(TypedDict):
    """A thread that will be tagged resolved and locked at fire_at."""
    thread_id: int
    guild_id: int
    fire_at: float
    created_at: float


class TrackedThreadRecord(TypedDict):
    """A forum thread watched for inactivity."""
    thread_id: int
    guild_id: int
    created_at: float
    stale_warning_sent: int
    last_renewed_at: Optional[float]
    warned_at: Optional[float]


class ThreadLinkRecord(TypedDict):
    """A single reference URL attached to a thread."""
    thread_id: int
    guild_id: int
    url: str
    creator_id: int
    created_at: float


class AuditLogRecord(TypedDict, total=False):
    """Type for audit log rows."""
    id: int
    guild_id: int
    action: str
    details: Optional[str]
    actor_id: Optional[int]
    actor_name: Optional[str]
    command_text: Optional[str]
    thread_id: Optional[int]
    message_id: Optional[int]
    created_at: float


@dataclass
class GuildSettings:
    """
    Per-guild forum configuration.

    helper_role_ids is a real set here; the comma-joined form only exists
    in the guild_settings table.
    """
    guild_id: int
    forum_channel_id: int
    resolved_tag_id: int
    duplicate_tag_id: int
    unanswered_tag_id: Optional[int] = None
    helper_role_ids: Set[int] = field(default_factory=set)
    guild_name: str = ""
    updated_at: float = 0.0
