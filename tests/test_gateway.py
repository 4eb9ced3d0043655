"""
Forum Steward - Gateway Tests
=============================

Tag merging, thread snapshots, the Discord gateway and retry decorator.
"""

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from src.services.lifecycle.gateway import (
    DiscordGateway,
    OutgoingMessage,
    ThreadNotFound,
    ThreadSnapshot,
    merge_tags,
    snapshot_from_thread,
)
from src.utils.discord_rate_limit import with_rate_limit_retry


def http_error(cls, status):
    return cls(MagicMock(status=status, reason="Error"), "failed")


def mock_thread(thread_id=1):
    thread = MagicMock(spec=discord.Thread)
    thread.id = thread_id
    thread.send = AsyncMock(return_value=SimpleNamespace(id=555))
    thread.edit = AsyncMock()
    return thread


# =============================================================================
# merge_tags() Tests
# =============================================================================

class TestMergeTags:
    """Tests for merge_tags function."""

    def test_add_and_remove(self):
        assert merge_tags({1, 2}, add=[3], remove=[1]) == frozenset({2, 3})

    def test_add_existing_is_noop(self):
        assert merge_tags({1, 2}, add=[2]) == frozenset({1, 2})

    def test_remove_absent_is_noop(self):
        assert merge_tags({1}, remove=[9]) == frozenset({1})

    def test_added_tag_survives_limit(self):
        """Test a full tag set still takes the new tag."""
        result = merge_tags({1, 2, 3, 4, 5}, add=[99])
        assert 99 in result
        assert len(result) == 5
        assert result == frozenset({1, 2, 3, 4, 99})

    def test_ignores_empty_ids(self):
        assert merge_tags({1}, add=[None, 0]) == frozenset({1})


# =============================================================================
# Snapshot Tests
# =============================================================================

class TestThreadSnapshot:
    """Tests for ThreadSnapshot and snapshot_from_thread."""

    def test_idle_since(self):
        assert ThreadSnapshot(1, 2, 3, 4, created_at=100.0).idle_since == 100.0
        assert ThreadSnapshot(1, 2, 3, 4, created_at=100.0, last_activity_at=250.0).idle_since == 250.0
        assert ThreadSnapshot(1, 2, 3, 4, created_at=100.0, last_activity_at=50.0).idle_since == 100.0

    def test_snapshot_from_thread(self):
        created = datetime(2024, 1, 1, tzinfo=timezone.utc)
        thread = SimpleNamespace(
            id=10,
            guild=SimpleNamespace(id=20),
            parent_id=30,
            owner_id=40,
            applied_tags=[SimpleNamespace(id=5), SimpleNamespace(id=6)],
            locked=False,
            archived=True,
            created_at=created,
            last_message_id=None,
            name="Help me",
        )

        snapshot = snapshot_from_thread(thread)

        assert snapshot.applied_tag_ids == frozenset({5, 6})
        assert snapshot.archived is True
        assert snapshot.created_at == created.timestamp()
        assert snapshot.last_activity_at is None
        assert snapshot.name == "Help me"


# =============================================================================
# DiscordGateway Tests
# =============================================================================

class TestDiscordGateway:
    """Tests for DiscordGateway against a mocked client."""

    @pytest.mark.asyncio
    async def test_fetch_missing_thread_returns_none(self):
        bot = MagicMock()
        bot.get_channel = MagicMock(return_value=None)
        bot.fetch_channel = AsyncMock(side_effect=http_error(discord.NotFound, 404))

        assert await DiscordGateway(bot).fetch_thread(1) is None

    @pytest.mark.asyncio
    async def test_fetch_non_thread_returns_none(self):
        bot = MagicMock()
        bot.get_channel = MagicMock(return_value=SimpleNamespace(id=1))

        assert await DiscordGateway(bot).fetch_thread(1) is None

    @pytest.mark.asyncio
    async def test_write_to_missing_thread_raises(self):
        bot = MagicMock()
        bot.get_channel = MagicMock(return_value=None)
        bot.fetch_channel = AsyncMock(side_effect=http_error(discord.Forbidden, 403))

        with pytest.raises(ThreadNotFound):
            await DiscordGateway(bot).set_locked(1, True)

    @pytest.mark.asyncio
    async def test_send_message(self):
        thread = mock_thread()
        bot = MagicMock()
        bot.get_channel = MagicMock(return_value=thread)

        message_id = await DiscordGateway(bot).send_message(1, OutgoingMessage(content="hi"))

        assert message_id == 555
        kwargs = thread.send.call_args.kwargs
        assert kwargs["content"] == "hi"
        assert "embed" not in kwargs
        assert kwargs["allowed_mentions"].everyone is False

    @pytest.mark.asyncio
    async def test_set_locked(self):
        thread = mock_thread()
        bot = MagicMock()
        bot.get_channel = MagicMock(return_value=thread)

        await DiscordGateway(bot).set_locked(1, True)

        thread.edit.assert_awaited_once_with(locked=True)

    @pytest.mark.asyncio
    async def test_forbidden_lock_is_not_retried(self):
        thread = mock_thread()
        thread.edit = AsyncMock(side_effect=http_error(discord.Forbidden, 403))
        bot = MagicMock()
        bot.get_channel = MagicMock(return_value=thread)

        with pytest.raises(discord.Forbidden):
            await DiscordGateway(bot).set_locked(1, True)
        assert thread.edit.await_count == 1


# =============================================================================
# with_rate_limit_retry() Tests
# =============================================================================

class TestRateLimitRetry:
    """Tests for with_rate_limit_retry decorator."""

    @pytest.mark.asyncio
    async def test_retries_server_errors(self):
        calls = []

        @with_rate_limit_retry(max_retries=3, base_delay=0.001)
        async def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise http_error(discord.DiscordServerError, 503)
            return "ok"

        assert await flaky() == "ok"
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        @with_rate_limit_retry(max_retries=2, base_delay=0.001)
        async def broken():
            raise http_error(discord.DiscordServerError, 500)

        with pytest.raises(discord.DiscordServerError):
            await broken()
