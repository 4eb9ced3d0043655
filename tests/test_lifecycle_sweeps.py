"""
Forum Steward - Lifecycle Sweep Tests
=====================================

Resolve-lock and stale sweeps against the FakeGateway and FakeClock.
"""

import pytest

from conftest import (
    DAY,
    DUPLICATE_TAG,
    GUILD_ID,
    OWNER_ID,
    RESOLVED_TAG,
    T0,
    UNANSWERED_TAG,
    audit_actions,
)


# =============================================================================
# Resolve-Lock Sweep
# =============================================================================

class TestLockSweep:
    """Tests for the resolve-lock sweep."""

    @pytest.mark.asyncio
    async def test_resolve_then_lock_at_fire_time(self, engine, gateway, test_db, settings, clock):
        """Test /resolved at t=0 locks at t=1800 with the resolved tag and one LOCK audit."""
        gateway.add_thread(id=1, applied_tag_ids=frozenset({UNANSWERED_TAG, 99}))

        result = engine.resolve(1, GUILD_ID)
        assert result.ok
        assert test_db.get_pending_lock(1)["fire_at"] == T0 + 1800

        clock.advance(1799)
        stats = await engine.run_lock_sweep()
        assert stats.examined == 0
        assert gateway.threads[1].locked is False

        clock.advance(1)
        stats = await engine.run_lock_sweep()
        assert stats.acted == 1

        thread = gateway.threads[1]
        assert thread.locked is True
        assert thread.applied_tag_ids == frozenset({RESOLVED_TAG, 99})
        assert test_db.get_pending_lock(1) is None
        assert audit_actions(test_db).count("LOCK") == 1

    @pytest.mark.asyncio
    async def test_resolve_twice_fires_once_at_second_time(self, engine, gateway, test_db, settings, clock):
        """Test last-write-wins: one row, second fire time, one lock action."""
        gateway.add_thread(id=1)

        engine.resolve(1, GUILD_ID)
        clock.advance(600)
        engine.resolve(1, GUILD_ID)
        assert test_db.count_lifecycle_rows()["pending_locks"] == 1

        clock.advance(1200)
        await engine.run_lock_sweep()
        assert gateway.calls_for("set_locked") == []

        clock.advance(600)
        await engine.run_lock_sweep()
        await engine.run_lock_sweep()
        assert gateway.calls_for("set_locked") == [1]
        assert audit_actions(test_db).count("LOCK") == 1

    @pytest.mark.asyncio
    async def test_row_deleted_even_when_lock_fails(self, engine, gateway, test_db, settings, clock):
        """Test a failed lock still removes the pending row and writes no LOCK audit."""
        gateway.add_thread(id=1)
        gateway.fail.add("set_locked")
        engine.resolve(1, GUILD_ID, delay_minutes=0)

        stats = await engine.run_lock_sweep()

        assert stats.failed == 1
        assert test_db.get_pending_lock(1) is None
        assert "LOCK" not in audit_actions(test_db)

    @pytest.mark.asyncio
    async def test_timeout_is_treated_as_failure(self, engine, gateway, test_db, settings):
        """Test a hung gateway call is bounded and the row is still finalized."""
        gateway.add_thread(id=1)
        gateway.hang.add("fetch_thread")
        engine.resolve(1, GUILD_ID, delay_minutes=0)

        stats = await engine.run_lock_sweep()

        assert stats.failed == 1
        assert test_db.get_pending_lock(1) is None

    @pytest.mark.asyncio
    async def test_missing_thread_drops_rows(self, engine, gateway, test_db, settings):
        """Test a deleted thread drops both its pending lock and tracking row."""
        test_db.upsert_tracked_thread(1, GUILD_ID, T0)
        engine.resolve(1, GUILD_ID, delay_minutes=0)

        await engine.run_lock_sweep()

        assert test_db.get_pending_lock(1) is None
        assert test_db.get_tracked_thread(1) is None

    @pytest.mark.asyncio
    async def test_unconfigured_guild_leaves_row(self, engine, gateway, test_db):
        """Test rows for a guild without settings are skipped, not deleted."""
        test_db.upsert_pending_lock(1, GUILD_ID, T0 - 1)

        stats = await engine.run_lock_sweep()

        assert stats.skipped == 1
        assert test_db.get_pending_lock(1) is not None
        assert gateway.calls == []

    @pytest.mark.asyncio
    async def test_one_failing_row_does_not_abort_batch(self, engine, gateway, test_db, settings):
        """Test rows are isolated from each other's failures."""
        gateway.add_thread(id=2)
        engine.resolve(1, GUILD_ID, delay_minutes=0)
        engine.resolve(2, GUILD_ID, delay_minutes=0)

        stats = await engine.run_lock_sweep()

        assert stats.examined == 2
        assert stats.acted == 1
        assert gateway.threads[2].locked is True

    @pytest.mark.asyncio
    async def test_lock_drops_stale_tracking(self, engine, gateway, test_db, settings):
        """Test a resolved thread stops being watched for inactivity."""
        gateway.add_thread(id=1)
        test_db.upsert_tracked_thread(1, GUILD_ID, T0)
        engine.resolve(1, GUILD_ID, delay_minutes=0)

        await engine.run_lock_sweep()

        assert test_db.get_tracked_thread(1) is None

    @pytest.mark.asyncio
    async def test_cancel_before_sweep_wins(self, engine, gateway, test_db, settings):
        """Test a cancel that lands before the sweep prevents the lock."""
        gateway.add_thread(id=1)
        engine.resolve(1, GUILD_ID, delay_minutes=0)

        assert engine.cancel(1, GUILD_ID).ok
        await engine.run_lock_sweep()

        assert gateway.threads[1].locked is False


# =============================================================================
# Stale Sweep
# =============================================================================

class TestStaleSweep:
    """Tests for the stale warning and auto-close sweep."""

    @pytest.mark.asyncio
    async def test_warn_at_24_days_then_close_at_30(self, engine, gateway, test_db, settings, clock):
        """Test the full warn then auto-close path."""
        gateway.add_thread(id=2)
        test_db.upsert_tracked_thread(2, GUILD_ID, T0)

        clock.advance(24 * DAY)
        await engine.run_stale_sweep()

        assert test_db.get_tracked_thread(2)["stale_warning_sent"] == 1
        assert gateway.threads[2].locked is False
        thread_id, message = gateway.sent[-1]
        assert thread_id == 2
        assert message.content == f"<@{OWNER_ID}>"
        assert "24 days" in message.embed.description

        clock.advance(6 * DAY)
        await engine.run_stale_sweep()

        assert gateway.threads[2].locked is True
        assert test_db.get_tracked_thread(2) is None
        assert audit_actions(test_db) == ["STALE_WARNING", "AUTO_CLOSE"]

    @pytest.mark.asyncio
    async def test_first_seen_past_close_window_gets_full_grace(self, engine, gateway, test_db, settings, clock):
        """Test a thread first swept at 31 days is warned, not closed in the same pass."""
        gateway.add_thread(id=7)
        test_db.upsert_tracked_thread(7, GUILD_ID, T0)

        clock.advance(31 * DAY)
        await engine.run_stale_sweep()

        assert gateway.threads[7].locked is False
        row = test_db.get_tracked_thread(7)
        assert row["stale_warning_sent"] == 1
        assert row["warned_at"] == T0 + 31 * DAY
        assert audit_actions(test_db) == ["STALE_WARNING"]
        _, message = gateway.sent[-1]
        assert "31 days" in message.embed.description
        assert "6 days" in message.embed.description

        clock.advance(6 * DAY - 1)
        stats = await engine.run_stale_sweep()
        assert stats.examined == 0
        assert gateway.threads[7].locked is False

        clock.advance(1)
        await engine.run_stale_sweep()
        assert gateway.threads[7].locked is True
        assert test_db.get_tracked_thread(7) is None
        assert audit_actions(test_db) == ["STALE_WARNING", "AUTO_CLOSE"]

    @pytest.mark.asyncio
    async def test_not_warned_before_window(self, engine, gateway, test_db, settings, clock):
        """Test nothing happens just before the warning window."""
        gateway.add_thread(id=2)
        test_db.upsert_tracked_thread(2, GUILD_ID, T0)

        clock.advance(24 * DAY - 1)
        stats = await engine.run_stale_sweep()

        assert stats.examined == 0
        assert gateway.sent == []

    @pytest.mark.asyncio
    async def test_owner_reply_rearms_windows(self, engine, gateway, test_db, settings, clock):
        """Test a reply at 25d blocks the close at 30d and re-warns at 49d."""
        gateway.add_thread(id=3)
        test_db.upsert_tracked_thread(3, GUILD_ID, T0)

        clock.advance(24 * DAY)
        await engine.run_stale_sweep()

        clock.advance(DAY)
        await engine.message_posted(3, GUILD_ID, OWNER_ID, is_owner=True)
        row = test_db.get_tracked_thread(3)
        assert row["stale_warning_sent"] == 0
        assert row["last_renewed_at"] == T0 + 25 * DAY

        clock.advance(5 * DAY)
        stats = await engine.run_stale_sweep()
        assert stats.examined == 0
        assert gateway.threads[3].locked is False

        clock.advance(19 * DAY - 1)
        stats = await engine.run_stale_sweep()
        assert stats.examined == 0

        clock.advance(1)
        await engine.run_stale_sweep()
        assert test_db.get_tracked_thread(3)["stale_warning_sent"] == 1
        assert audit_actions(test_db).count("STALE_WARNING") == 2

    @pytest.mark.asyncio
    async def test_replay_finds_nothing_new(self, engine, gateway, test_db, settings, clock):
        """Test two back-to-back sweeps: the second examines zero rows."""
        for thread_id in (1, 2, 3):
            gateway.add_thread(id=thread_id)
            test_db.upsert_tracked_thread(thread_id, GUILD_ID, T0)
        test_db.set_stale_warning_sent(3, True)
        test_db.upsert_tracked_thread(4, GUILD_ID, T0)

        clock.advance(31 * DAY)
        first = await engine.run_stale_sweep()
        second = await engine.run_stale_sweep()

        assert first.examined > 0
        assert second.examined == 0

    @pytest.mark.asyncio
    async def test_resolved_tag_drops_row_without_warning(self, engine, gateway, test_db, settings, clock):
        """Test a thread already carrying the resolved tag is stale bookkeeping."""
        gateway.add_thread(id=1, applied_tag_ids=frozenset({RESOLVED_TAG}))
        test_db.upsert_tracked_thread(1, GUILD_ID, T0)

        clock.advance(24 * DAY)
        stats = await engine.run_stale_sweep()

        assert stats.skipped == 1
        assert gateway.sent == []
        assert test_db.get_tracked_thread(1) is None

    @pytest.mark.asyncio
    async def test_duplicate_tag_drops_row_without_warning(self, engine, gateway, test_db, settings, clock):
        """Test a duplicate-tagged thread is not warned."""
        gateway.add_thread(id=1, applied_tag_ids=frozenset({DUPLICATE_TAG}))
        test_db.upsert_tracked_thread(1, GUILD_ID, T0)

        clock.advance(24 * DAY)
        await engine.run_stale_sweep()

        assert gateway.sent == []
        assert test_db.get_tracked_thread(1) is None

    @pytest.mark.asyncio
    async def test_locked_thread_dropped_at_warning(self, engine, gateway, test_db, settings, clock):
        """Test a manually locked thread is dropped rather than warned."""
        gateway.add_thread(id=1, locked=True)
        test_db.upsert_tracked_thread(1, GUILD_ID, T0)

        clock.advance(24 * DAY)
        await engine.run_stale_sweep()

        assert gateway.sent == []
        assert test_db.get_tracked_thread(1) is None

    @pytest.mark.asyncio
    async def test_close_drops_gone_thread(self, engine, gateway, test_db, settings, clock):
        """Test a warned thread that was deleted is just untracked."""
        test_db.upsert_tracked_thread(1, GUILD_ID, T0)
        test_db.set_stale_warning_sent(1, True)

        clock.advance(30 * DAY)
        stats = await engine.run_stale_sweep()

        assert stats.skipped == 1
        assert test_db.get_tracked_thread(1) is None
        assert "AUTO_CLOSE" not in audit_actions(test_db)

    @pytest.mark.asyncio
    async def test_close_drops_archived_thread(self, engine, gateway, test_db, settings, clock):
        """Test a warned thread archived out-of-band is untracked without action."""
        gateway.add_thread(id=1, archived=True)
        test_db.upsert_tracked_thread(1, GUILD_ID, T0)
        test_db.set_stale_warning_sent(1, True)

        clock.advance(30 * DAY)
        await engine.run_stale_sweep()

        assert gateway.calls_for("set_locked") == []
        assert test_db.get_tracked_thread(1) is None

    @pytest.mark.asyncio
    async def test_warning_flagged_even_if_send_fails(self, engine, gateway, test_db, settings, clock):
        """Test forward progress: a failed warning still sets the flag."""
        gateway.add_thread(id=1)
        gateway.fail.add("send_message")
        test_db.upsert_tracked_thread(1, GUILD_ID, T0)

        clock.advance(24 * DAY)
        stats = await engine.run_stale_sweep()

        assert stats.failed == 1
        assert test_db.get_tracked_thread(1)["stale_warning_sent"] == 1
        entry = test_db.get_audit_logs(GUILD_ID, action="STALE_WARNING")[0]
        assert "not delivered" in entry["details"]

    @pytest.mark.asyncio
    async def test_fetch_failure_keeps_row_for_next_pass(self, engine, gateway, test_db, settings, clock):
        """Test a transient fetch failure leaves the thread tracked and unflagged."""
        gateway.add_thread(id=1)
        gateway.fail.add("fetch_thread")
        test_db.upsert_tracked_thread(1, GUILD_ID, T0)

        clock.advance(24 * DAY)
        stats = await engine.run_stale_sweep()

        assert stats.failed == 1
        assert test_db.get_tracked_thread(1)["stale_warning_sent"] == 0

    @pytest.mark.asyncio
    async def test_auto_close_clears_pending_lock(self, engine, gateway, test_db, settings, clock):
        """Test closing a stale thread also drops any pending resolve timer."""
        gateway.add_thread(id=1)
        test_db.upsert_tracked_thread(1, GUILD_ID, T0)
        test_db.set_stale_warning_sent(1, True)
        test_db.upsert_pending_lock(1, GUILD_ID, T0 + 60 * DAY)

        clock.advance(30 * DAY)
        await engine.run_stale_sweep()

        assert gateway.threads[1].locked is True
        assert test_db.get_pending_lock(1) is None

    @pytest.mark.asyncio
    async def test_unconfigured_guild_skips_rows(self, engine, gateway, test_db, clock):
        """Test tracked rows of an unconfigured guild are left alone."""
        test_db.upsert_tracked_thread(1, GUILD_ID, T0)

        clock.advance(24 * DAY)
        stats = await engine.run_stale_sweep()

        assert stats.skipped == 1
        assert test_db.get_tracked_thread(1) is not None
        assert gateway.calls == []
