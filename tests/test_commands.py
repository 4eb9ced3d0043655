"""
Forum Steward - Command Layer Tests
===================================

Tag resolution for /setup, the forum context check, denials and the
persistent Keep Post Open button.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from conftest import FORUM_ID, GUILD_ID, HELPER_ROLE, OWNER_ID, audit_actions
from src.commands.forum_helpers import deny, get_forum_context
from src.commands.setup.cog import resolve_forum_tag
from src.core import config as config_module
from src.core.config import Config
from src.services.lifecycle.views import KeepOpenButton


def forum_with_tags():
    return SimpleNamespace(available_tags=[
        SimpleNamespace(id=11, name="Resolved"),
        SimpleNamespace(id=22, name="Duplicate"),
        SimpleNamespace(id=33, name="Unanswered"),
    ])


def interaction_in(channel, user_id=OWNER_ID, roles=()):
    interaction = MagicMock()
    interaction.guild = SimpleNamespace(id=GUILD_ID, name="Test Server")
    interaction.channel = channel
    interaction.channel_id = getattr(channel, "id", None)
    interaction.user = SimpleNamespace(
        id=user_id,
        name="user",
        guild_permissions=SimpleNamespace(administrator=False, manage_threads=False),
        roles=[SimpleNamespace(id=r) for r in roles],
    )
    interaction.response.is_done = MagicMock(return_value=False)
    interaction.response.send_message = AsyncMock()
    interaction.original_response = AsyncMock()
    interaction.followup.send = AsyncMock()
    return interaction


def forum_thread(parent_id=FORUM_ID, owner_id=OWNER_ID):
    thread = MagicMock(spec=discord.Thread)
    thread.id = 1
    thread.parent_id = parent_id
    thread.owner_id = owner_id
    return thread


@pytest.fixture
def bot(test_db, engine, monkeypatch):
    monkeypatch.setattr(config_module, "_config", Config(discord_token="t"))
    return SimpleNamespace(db=test_db, lifecycle=engine)


class TestResolveForumTag:
    """Tests for resolve_forum_tag function."""

    def test_by_name_case_insensitive(self):
        assert resolve_forum_tag(forum_with_tags(), "resolved").id == 11

    def test_by_id(self):
        assert resolve_forum_tag(forum_with_tags(), " 22 ").id == 22

    def test_missing(self):
        assert resolve_forum_tag(forum_with_tags(), "Solved") is None
        assert resolve_forum_tag(forum_with_tags(), None) is None


class TestForumContext:
    """Tests for get_forum_context function."""

    @pytest.mark.asyncio
    async def test_owner_in_forum(self, bot, settings):
        ctx = await get_forum_context(bot, interaction_in(forum_thread()))

        assert ctx is not None
        assert ctx.is_owner is True
        assert ctx.is_helper is False
        assert ctx.can_manage is True

    @pytest.mark.asyncio
    async def test_helper_role(self, bot, settings):
        interaction = interaction_in(forum_thread(), user_id=5, roles=[HELPER_ROLE])

        ctx = await get_forum_context(bot, interaction)

        assert ctx.is_owner is False
        assert ctx.is_helper is True

    @pytest.mark.asyncio
    async def test_outside_forum(self, bot, settings):
        interaction = interaction_in(forum_thread(parent_id=FORUM_ID + 1))

        assert await get_forum_context(bot, interaction) is None
        interaction.response.send_message.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_not_configured(self, bot):
        interaction = interaction_in(forum_thread())

        assert await get_forum_context(bot, interaction) is None
        assert "/setup" in interaction.response.send_message.call_args.kwargs["content"]

    @pytest.mark.asyncio
    async def test_still_starting(self, test_db):
        interaction = interaction_in(forum_thread())
        starting = SimpleNamespace(db=test_db, lifecycle=None)

        assert await get_forum_context(starting, interaction) is None


class TestDeny:
    """Tests for deny function."""

    @pytest.mark.asyncio
    async def test_audits_and_replies(self, bot, test_db, settings):
        interaction = interaction_in(forum_thread(), user_id=5)

        await deny(bot, interaction, "/duplicate", "Not a helper")

        entry = test_db.get_audit_logs(GUILD_ID)[0]
        assert entry["action"] == "DENIED"
        assert entry["command_text"] == "/duplicate"
        assert interaction.response.send_message.call_args.kwargs["ephemeral"] is True
        assert audit_actions(test_db) == ["DENIED"]


class TestKeepOpenButton:
    """Tests for the persistent Keep Post Open button."""

    def test_custom_id_carries_thread(self):
        button = KeepOpenButton(123)
        assert button.custom_id == "steward_keep:123"
        assert button.thread_id == 123

    @pytest.mark.asyncio
    async def test_from_custom_id(self):
        match = KeepOpenButton.__discord_ui_compiled_template__.fullmatch("steward_keep:456")
        button = await KeepOpenButton.from_custom_id(MagicMock(), MagicMock(), match)
        assert button.thread_id == 456
