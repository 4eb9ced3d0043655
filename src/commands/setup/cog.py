"""
Forum Steward - Setup Cog
=========================

Per-guild configuration: /setup and /settings.

Tag arguments accept either a tag name or its id and are resolved
against the chosen forum's available tags.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

import discord
from discord import app_commands
from discord.ext import commands

from src.core.config import is_developer, parse_id_set
from src.core.constants import ACTION_SETUP
from src.core.database import GuildSettings
from src.core.logger import logger
from src.services.lifecycle.audit import AuditSink
from src.services.lifecycle.embeds import build_settings_embed
from src.utils.interaction import safe_respond

from ..forum_helpers import deny

if TYPE_CHECKING:
    from src.bot import StewardBot


# =============================================================================
# Tag Resolution
# =============================================================================

def resolve_forum_tag(forum, value: Optional[str]):
    """
    Find a forum tag by id or by case-insensitive name.

    Returns:
        The matching tag, or None if value is empty or nothing matches.
    """
    if not value:
        return None

    value = value.strip()
    tags = getattr(forum, "available_tags", [])

    if value.isdigit():
        for tag in tags:
            if tag.id == int(value):
                return tag

    lowered = value.casefold()
    for tag in tags:
        if tag.name.casefold() == lowered:
            return tag
    return None


def _is_admin(member) -> bool:
    if member is None:
        return False
    if is_developer(member.id):
        return True
    permissions = getattr(member, "guild_permissions", None)
    return permissions is not None and permissions.administrator


# =============================================================================
# Setup Cog
# =============================================================================

class SetupCog(commands.Cog):
    """Guild configuration commands for administrators."""

    def __init__(self, bot: "StewardBot") -> None:
        self.bot = bot

    async def tag_autocomplete(
        self,
        interaction: discord.Interaction,
        current: str,
    ) -> List[app_commands.Choice[str]]:
        """Suggest tags from the forum picked in the same command."""
        picked = getattr(interaction.namespace, "forum", None)
        if picked is None or interaction.guild is None:
            return []

        forum = interaction.guild.get_channel(picked.id)
        if not isinstance(forum, discord.ForumChannel):
            return []

        current = current.casefold()
        return [
            app_commands.Choice(name=tag.name, value=str(tag.id))
            for tag in forum.available_tags
            if current in tag.name.casefold()
        ][:25]

    # =========================================================================
    # /setup
    # =========================================================================

    @app_commands.command(name="setup", description="Configure the help forum for this server")
    @app_commands.describe(
        forum="The help forum channel",
        resolved_tag="Tag applied when a thread is resolved",
        duplicate_tag="Tag applied when a thread is a duplicate",
        unanswered_tag="Tag applied to new threads until someone answers",
        helper_roles="Helper roles (mentions or ids, comma separated)",
    )
    @app_commands.autocomplete(
        resolved_tag=tag_autocomplete,
        duplicate_tag=tag_autocomplete,
        unanswered_tag=tag_autocomplete,
    )
    @app_commands.default_permissions(administrator=True)
    @app_commands.guild_only()
    async def setup_command(
        self,
        interaction: discord.Interaction,
        forum: discord.ForumChannel,
        resolved_tag: str,
        duplicate_tag: str,
        unanswered_tag: Optional[str] = None,
        helper_roles: Optional[str] = None,
    ) -> None:
        """Save the forum, tags and helper roles for this guild."""
        if interaction.guild is None:
            return

        if not _is_admin(interaction.user):
            await deny(self.bot, interaction, "/setup", "Not an administrator")
            return

        resolved = resolve_forum_tag(forum, resolved_tag)
        duplicate = resolve_forum_tag(forum, duplicate_tag)
        unanswered = resolve_forum_tag(forum, unanswered_tag)

        missing = [
            name for name, raw, tag in (
                ("resolved_tag", resolved_tag, resolved),
                ("duplicate_tag", duplicate_tag, duplicate),
                ("unanswered_tag", unanswered_tag, unanswered),
            )
            if raw and tag is None
        ]
        if missing:
            await safe_respond(
                interaction,
                f"I couldn't find these tags in {forum.mention}: {', '.join(missing)}",
            )
            return

        settings = GuildSettings(
            guild_id=interaction.guild.id,
            guild_name=interaction.guild.name,
            forum_channel_id=forum.id,
            resolved_tag_id=resolved.id,
            duplicate_tag_id=duplicate.id,
            unanswered_tag_id=unanswered.id if unanswered else None,
            helper_role_ids=parse_id_set(helper_roles),
        )
        self.bot.db.save_guild_settings(settings)

        audit = self.bot.lifecycle.audit if self.bot.lifecycle else AuditSink(self.bot.db)
        audit.record(
            guild_id=interaction.guild.id,
            action=ACTION_SETUP,
            details=(
                f"forum={forum.id} resolved={resolved.id} duplicate={duplicate.id} "
                f"unanswered={settings.unanswered_tag_id} helpers={len(settings.helper_role_ids)}"
            ),
            actor_id=interaction.user.id,
            actor_name=str(interaction.user),
            command_text="/setup",
        )

        await safe_respond(
            interaction,
            "Settings saved.",
            embed=build_settings_embed(self.bot.db.get_guild_settings(interaction.guild.id)),
        )

    # =========================================================================
    # /settings
    # =========================================================================

    @app_commands.command(name="settings", description="Show the help forum settings for this server")
    @app_commands.guild_only()
    async def settings_command(self, interaction: discord.Interaction) -> None:
        """Show the saved configuration."""
        if interaction.guild is None:
            return

        settings = self.bot.db.get_guild_settings(interaction.guild.id)
        if settings is None:
            await safe_respond(interaction, "This server hasn't been set up yet. Use **/setup** first.")
            return

        logger.debug("Settings Viewed", [
            ("Guild", f"{interaction.guild.name} ({interaction.guild.id})"),
            ("User", str(interaction.user.id)),
        ])
        await safe_respond(interaction, embed=build_settings_embed(settings))


__all__ = ["SetupCog", "resolve_forum_tag"]
