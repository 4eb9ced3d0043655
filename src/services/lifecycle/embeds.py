"""
Forum Steward - Lifecycle Embeds
================================

Embed builders for every message the lifecycle engine posts.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from datetime import datetime, timezone
from typing import Optional

import discord

from src.core.config import EmbedColors
from src.core.database.models import GuildSettings
from src.utils.time_format import discord_timestamp, format_duration


# =============================================================================
# Thread Created
# =============================================================================

def build_welcome_embed() -> discord.Embed:
    """Build the welcome embed posted into new threads."""
    return discord.Embed(
        title="Help Guidelines",
        description=(
            "A command helper will reach out to you soon! "
            "Use **/resolved** when finished!"
        ),
        color=EmbedColors.INFO,
    )


# =============================================================================
# Resolve / Lock
# =============================================================================

def build_resolved_embed(delay_minutes: int, fire_at: float) -> discord.Embed:
    """Build the confirmation shown when /resolved arms the timer."""
    if delay_minutes <= 0:
        description = "**Thread marked as Resolved.** It will be tagged and locked on the next check."
    else:
        description = (
            f"**Thread marked as Resolved.** It will be tagged and locked in "
            f"**{format_duration(delay_minutes)}** ({discord_timestamp(fire_at)}).\n\n"
            f"Changed your mind? Use **/cancel**."
        )
    return discord.Embed(
        title="✅ Resolved",
        description=description,
        color=EmbedColors.SUCCESS,
    )


def build_lock_notice_embed() -> discord.Embed:
    """Build the notice posted when a resolve timer fires."""
    return discord.Embed(
        title="🔒 Thread Locked",
        description="This thread was marked as resolved and is now locked. Thanks for asking!",
        color=EmbedColors.SUCCESS,
    )


def build_cancelled_embed() -> discord.Embed:
    return discord.Embed(
        title="↩️ Resolve Cancelled",
        description="The resolve timer was cancelled. This thread will stay open.",
        color=EmbedColors.INFO,
    )


# =============================================================================
# Stale Handling
# =============================================================================

def build_stale_warning_embed(
    owner_id: int,
    days_inactive: int,
    days_until_close: int,
) -> discord.Embed:
    """Build the inactivity warning posted before auto-close."""
    return discord.Embed(
        title="⚠️ Inactivity Warning",
        description=(
            f"<@{owner_id}>, this post has been inactive for **{days_inactive} days**.\n\n"
            f"To keep the forum clean, it will be closed in **{days_until_close} days** "
            f"unless you reply or click **Keep Post Open** below."
        ),
        color=EmbedColors.WARNING,
    )


def build_auto_close_embed(days_inactive: int) -> discord.Embed:
    """Build the notice posted when a stale thread is closed."""
    return discord.Embed(
        title="🔐 Thread Closed",
        description=(
            f"This post was closed after **{days_inactive} days** without activity. "
            f"If you still need help, please open a new post."
        ),
        color=EmbedColors.CLOSED,
    )


def build_renewed_embed() -> discord.Embed:
    return discord.Embed(
        title="🔄 Closure Cancelled",
        description="✅ **Closure cancelled.** This thread will stay open for now!",
        color=EmbedColors.SUCCESS,
    )


# =============================================================================
# Duplicate
# =============================================================================

def build_duplicate_embed(original_link: str) -> discord.Embed:
    """Build the redirect posted when a thread is closed as duplicate."""
    return discord.Embed(
        title="Duplicate Post",
        description=(
            f"This issue has already been addressed here:\n{original_link}\n\n"
            f"To keep the channel organized, this thread is being closed. "
            f"Please refer to the link above for the solution!"
        ),
        color=EmbedColors.DUPLICATE,
    )


# =============================================================================
# Settings / Links
# =============================================================================

def _tag_line(tag_id: Optional[int]) -> str:
    return f"`{tag_id}`" if tag_id else "Not set"


def build_settings_embed(settings: GuildSettings) -> discord.Embed:
    """Build the /settings overview."""
    embed = discord.Embed(
        title="⚙️ Forum Settings",
        color=EmbedColors.INFO,
    )
    embed.add_field(name="Forum", value=f"<#{settings.forum_channel_id}>", inline=False)
    embed.add_field(name="Resolved Tag", value=_tag_line(settings.resolved_tag_id), inline=True)
    embed.add_field(name="Duplicate Tag", value=_tag_line(settings.duplicate_tag_id), inline=True)
    embed.add_field(name="Unanswered Tag", value=_tag_line(settings.unanswered_tag_id), inline=True)
    roles = ", ".join(f"<@&{r}>" for r in sorted(settings.helper_role_ids)) or "None"
    embed.add_field(name="Helper Roles", value=roles, inline=False)
    if settings.updated_at:
        embed.set_footer(text="Last updated")
        embed.timestamp = datetime.fromtimestamp(settings.updated_at, tz=timezone.utc)
    return embed


def build_link_embed(url: str, creator_id: int) -> discord.Embed:
    return discord.Embed(
        title="🔗 Thread Link",
        description=f"{url}\n\nSet by <@{creator_id}>",
        color=EmbedColors.INFO,
    )


__all__ = [
    "build_welcome_embed",
    "build_resolved_embed",
    "build_lock_notice_embed",
    "build_cancelled_embed",
    "build_stale_warning_embed",
    "build_auto_close_embed",
    "build_renewed_embed",
    "build_duplicate_embed",
    "build_settings_embed",
    "build_link_embed",
]
