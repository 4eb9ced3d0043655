"""
Forum Steward - Database Tests
==============================

Tests for the registry, settings, links and audit tables.
"""

from conftest import DAY, GUILD_ID, HELPER_ROLE, T0, make_settings


class TestGuildSettings:
    """Tests for guild settings operations."""

    def test_unconfigured_guild_returns_none(self, test_db):
        """Test a guild without settings returns None."""
        assert test_db.get_guild_settings(GUILD_ID) is None

    def test_save_and_get_round_trip(self, test_db):
        """Test helper roles come back as a set of ints."""
        test_db.save_guild_settings(make_settings(helper_role_ids={HELPER_ROLE, 5, 7}))

        result = test_db.get_guild_settings(GUILD_ID)
        assert result.helper_role_ids == {HELPER_ROLE, 5, 7}
        assert result.unanswered_tag_id == 33
        assert result.updated_at > 0

    def test_save_overwrites_wholesale(self, test_db):
        """Test saving again replaces the optional unanswered tag."""
        test_db.save_guild_settings(make_settings())
        test_db.save_guild_settings(make_settings(unanswered_tag_id=None, helper_role_ids=set()))

        result = test_db.get_guild_settings(GUILD_ID)
        assert result.unanswered_tag_id is None
        assert result.helper_role_ids == set()

    def test_configured_guild_ids(self, test_db):
        """Test listing configured guilds."""
        test_db.save_guild_settings(make_settings(guild_id=2))
        test_db.save_guild_settings(make_settings(guild_id=1))
        assert test_db.get_configured_guild_ids() == [1, 2]


class TestPendingLocks:
    """Tests for pending lock operations."""

    def test_upsert_overwrites_fire_time(self, test_db):
        """Test re-arming keeps a single row with the latest fire time."""
        test_db.upsert_pending_lock(1, GUILD_ID, T0 + 60)
        test_db.upsert_pending_lock(1, GUILD_ID, T0 + 600)

        assert test_db.get_pending_lock(1)["fire_at"] == T0 + 600
        assert test_db.count_lifecycle_rows()["pending_locks"] == 1

    def test_due_pending_locks(self, test_db):
        """Test only rows at or past their fire time are due."""
        test_db.upsert_pending_lock(1, GUILD_ID, T0)
        test_db.upsert_pending_lock(2, GUILD_ID, T0 - 10)
        test_db.upsert_pending_lock(3, GUILD_ID, T0 + 10)

        due = [row["thread_id"] for row in test_db.due_pending_locks(T0)]
        assert due == [2, 1]

    def test_delete_pending_lock(self, test_db):
        """Test delete reports whether a row existed."""
        test_db.upsert_pending_lock(1, GUILD_ID, T0)
        assert test_db.delete_pending_lock(1) is True
        assert test_db.delete_pending_lock(1) is False

    def test_conditional_delete_skips_rearmed_row(self, test_db):
        """Test a claim with due_before leaves a timer pushed into the future."""
        test_db.upsert_pending_lock(1, GUILD_ID, T0 + 1800)

        assert test_db.delete_pending_lock(1, due_before=T0) is False
        assert test_db.get_pending_lock(1) is not None

        assert test_db.delete_pending_lock(1, due_before=T0 + 1800) is True
        assert test_db.get_pending_lock(1) is None


class TestTrackedThreads:
    """Tests for stale tracking operations."""

    def test_upsert_is_insert_if_absent(self, test_db):
        """Test a second upsert neither overwrites nor resets the row."""
        assert test_db.upsert_tracked_thread(1, GUILD_ID, T0) is True
        test_db.set_stale_warning_sent(1, True)

        assert test_db.upsert_tracked_thread(1, GUILD_ID, T0 + DAY) is False
        row = test_db.get_tracked_thread(1)
        assert row["created_at"] == T0
        assert row["stale_warning_sent"] == 1

    def test_set_stale_warning_sent_with_renewal(self, test_db):
        """Test renewal clears the flag and stamps last_renewed_at."""
        test_db.upsert_tracked_thread(1, GUILD_ID, T0)
        test_db.set_stale_warning_sent(1, True)

        assert test_db.set_stale_warning_sent(1, False, renewed_at=T0 + 5) is True
        row = test_db.get_tracked_thread(1)
        assert row["stale_warning_sent"] == 0
        assert row["last_renewed_at"] == T0 + 5

    def test_set_stale_warning_sent_untracked(self, test_db):
        """Test updating an untracked thread reports False."""
        assert test_db.set_stale_warning_sent(404, True) is False

    def test_threads_needing_warning_uses_latest_activity(self, test_db):
        """Test the window is measured from max(created_at, last_renewed_at)."""
        window = 24 * DAY
        now = T0 + 25 * DAY

        test_db.upsert_tracked_thread(1, GUILD_ID, T0)
        test_db.upsert_tracked_thread(2, GUILD_ID, T0)
        test_db.set_stale_warning_sent(2, False, renewed_at=T0 + 10 * DAY)
        test_db.upsert_tracked_thread(3, GUILD_ID, T0 + 2 * DAY)

        ids = {row["thread_id"] for row in test_db.threads_needing_warning(now, window)}
        assert ids == {1}

    def test_threads_needing_close_requires_warning(self, test_db):
        """Test only warned threads are close candidates."""
        window = 30 * DAY
        now = T0 + 31 * DAY

        test_db.upsert_tracked_thread(1, GUILD_ID, T0)
        test_db.upsert_tracked_thread(2, GUILD_ID, T0)
        test_db.set_stale_warning_sent(2, True)

        ids = {row["thread_id"] for row in test_db.threads_needing_close(now, window)}
        assert ids == {2}

    def test_threads_needing_close_honors_grace_since_warning(self, test_db):
        """Test a recent warning holds the close back however old the thread is."""
        now = T0 + 40 * DAY
        grace = 6 * DAY

        test_db.upsert_tracked_thread(1, GUILD_ID, T0)
        test_db.set_stale_warning_sent(1, True, warned_at=now - DAY)
        test_db.upsert_tracked_thread(2, GUILD_ID, T0)
        test_db.set_stale_warning_sent(2, True, warned_at=now - grace)

        ids = {row["thread_id"] for row in test_db.threads_needing_close(now, 30 * DAY, grace=grace)}
        assert ids == {2}

    def test_renewal_clears_warned_at(self, test_db):
        """Test clearing the flag also clears the warning stamp."""
        test_db.upsert_tracked_thread(1, GUILD_ID, T0)
        test_db.set_stale_warning_sent(1, True, warned_at=T0 + 24 * DAY)

        test_db.set_stale_warning_sent(1, False, renewed_at=T0 + 25 * DAY)

        assert test_db.get_tracked_thread(1)["warned_at"] is None

    def test_delete_tracked_thread(self, test_db):
        """Test delete reports whether a row existed."""
        test_db.upsert_tracked_thread(1, GUILD_ID, T0)
        assert test_db.delete_tracked_thread(1) is True
        assert test_db.delete_tracked_thread(1) is False


class TestThreadLinks:
    """Tests for thread link operations."""

    def test_set_overwrites(self, test_db):
        """Test setting a link twice keeps the latest."""
        test_db.set_thread_link(1, GUILD_ID, "https://a.example", 10)
        test_db.set_thread_link(1, GUILD_ID, "https://b.example", 20)

        link = test_db.get_thread_link(1)
        assert link["url"] == "https://b.example"
        assert link["creator_id"] == 20

    def test_delete(self, test_db):
        """Test delete reports whether a link existed."""
        test_db.set_thread_link(1, GUILD_ID, "https://a.example", 10)
        assert test_db.delete_thread_link(1) is True
        assert test_db.get_thread_link(1) is None
        assert test_db.delete_thread_link(1) is False


class TestAuditLogs:
    """Tests for audit log operations."""

    def test_newest_first_and_filter(self, test_db):
        """Test ordering and action filter."""
        test_db.add_audit_log(GUILD_ID, "GREET", created_at=T0)
        test_db.add_audit_log(GUILD_ID, "LOCK", created_at=T0 + 1)
        test_db.add_audit_log(GUILD_ID, "GREET", created_at=T0 + 2)

        actions = [row["action"] for row in test_db.get_audit_logs(GUILD_ID)]
        assert actions == ["GREET", "LOCK", "GREET"]
        assert len(test_db.get_audit_logs(GUILD_ID, action="GREET")) == 2

    def test_details_truncated(self, test_db):
        """Test long details are capped."""
        test_db.add_audit_log(GUILD_ID, "DUPLICATE", details="x" * 5000)
        row = test_db.get_audit_logs(GUILD_ID)[0]
        assert len(row["details"]) == 1000
        assert row["details"].endswith("...")

    def test_prune(self, test_db):
        """Test pruning removes only older entries."""
        test_db.add_audit_log(GUILD_ID, "GREET", created_at=T0)
        test_db.add_audit_log(GUILD_ID, "LOCK", created_at=T0 + DAY)

        assert test_db.prune_audit_logs(T0 + 1) == 1
        assert [r["action"] for r in test_db.get_audit_logs(GUILD_ID)] == ["LOCK"]
