"""
Forum Steward - Test Fixtures
=============================

Shared fixtures for all tests.

The lifecycle engine is exercised against a real SQLite database on a
temp path, an in-memory FakeGateway and a FakeClock. Nothing talks to
Discord.
"""

import os
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set up test environment before importing modules
os.environ["TESTING"] = "1"

from src.core.config import Config  # noqa: E402
from src.core.database import GuildSettings  # noqa: E402
from src.services.lifecycle import (  # noqa: E402
    GatewayError,
    LifecycleService,
    OutgoingMessage,
    ThreadGateway,
    ThreadNotFound,
    ThreadSnapshot,
)


GUILD_ID = 987654321
FORUM_ID = 444555666
RESOLVED_TAG = 11
DUPLICATE_TAG = 22
UNANSWERED_TAG = 33
HELPER_ROLE = 222333444
OWNER_ID = 123456789
HELPER_ID = 111222333

DAY = 86400
T0 = 1_700_000_000.0


# =============================================================================
# Fakes
# =============================================================================

class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: float = T0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeGateway(ThreadGateway):
    """
    In-memory ThreadGateway.

    Threads are stored as ThreadSnapshot values and replaced on every
    write. Operations named in `fail` raise GatewayError; operations in
    `hang` never return (to exercise timeouts).
    """

    def __init__(self) -> None:
        self.threads: Dict[int, ThreadSnapshot] = {}
        self.calls: List[Tuple[str, int]] = []
        self.sent: List[Tuple[int, OutgoingMessage]] = []
        self.fail: Set[str] = set()
        self.hang: Set[str] = set()
        self._next_message_id = 900_000

    def add_thread(self, **kwargs) -> ThreadSnapshot:
        defaults = dict(
            guild_id=GUILD_ID,
            parent_id=FORUM_ID,
            owner_id=OWNER_ID,
            created_at=T0,
        )
        defaults.update(kwargs)
        thread = ThreadSnapshot(**defaults)
        self.threads[thread.id] = thread
        return thread

    def calls_for(self, op: str) -> List[int]:
        return [tid for name, tid in self.calls if name == op]

    async def _enter(self, op: str, thread_id: int) -> None:
        self.calls.append((op, thread_id))
        if op in self.hang:
            import asyncio
            await asyncio.Event().wait()
        if op in self.fail:
            raise GatewayError(f"{op} failed")

    def _replace(self, thread_id: int, **changes) -> None:
        thread = self.threads.get(thread_id)
        if thread is None:
            raise ThreadNotFound(thread_id)
        fields = {**thread.__dict__, **changes}
        self.threads[thread_id] = ThreadSnapshot(**fields)

    async def fetch_thread(self, thread_id: int) -> Optional[ThreadSnapshot]:
        await self._enter("fetch_thread", thread_id)
        return self.threads.get(thread_id)

    async def set_tags(self, thread_id: int, tag_ids: Iterable[int]) -> None:
        await self._enter("set_tags", thread_id)
        self._replace(thread_id, applied_tag_ids=frozenset(tag_ids))

    async def set_locked(self, thread_id: int, locked: bool) -> None:
        await self._enter("set_locked", thread_id)
        self._replace(thread_id, locked=locked)

    async def send_message(self, thread_id: int, message: OutgoingMessage) -> Optional[int]:
        await self._enter("send_message", thread_id)
        if thread_id not in self.threads:
            raise ThreadNotFound(thread_id)
        self.sent.append((thread_id, message))
        self._next_message_id += 1
        return self._next_message_id

    async def fetch_forum_active_threads(self, forum_id: int) -> List[ThreadSnapshot]:
        await self._enter("fetch_forum_active_threads", forum_id)
        return [
            t for t in self.threads.values()
            if t.parent_id == forum_id and not t.archived
        ]


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def temp_db_path(tmp_path):
    """Create a temporary database path for testing."""
    return tmp_path / "test_steward.db"


@pytest.fixture
def test_db(temp_db_path, monkeypatch):
    """Create a fresh test database instance."""
    from src.core.database import manager

    # Reset singleton
    manager.DatabaseManager._instance = None

    # Patch the DB path
    monkeypatch.setattr(manager, "DB_PATH", temp_db_path)
    monkeypatch.setattr(manager, "DATA_DIR", temp_db_path.parent)

    db = manager.DatabaseManager()

    yield db

    # Cleanup
    db.close()
    manager.DatabaseManager._instance = None


def make_settings(**overrides) -> GuildSettings:
    values = dict(
        guild_id=GUILD_ID,
        guild_name="Test Server",
        forum_channel_id=FORUM_ID,
        resolved_tag_id=RESOLVED_TAG,
        duplicate_tag_id=DUPLICATE_TAG,
        unanswered_tag_id=UNANSWERED_TAG,
        helper_role_ids={HELPER_ROLE},
    )
    values.update(overrides)
    return GuildSettings(**values)


@pytest.fixture
def settings(test_db) -> GuildSettings:
    """Save and return the default guild settings."""
    s = make_settings()
    test_db.save_guild_settings(s)
    return s


# =============================================================================
# Engine Fixtures
# =============================================================================

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def config() -> Config:
    return Config(discord_token="test-token", gateway_timeout=0.2)


@pytest.fixture
def engine(test_db, gateway, config, clock) -> LifecycleService:
    """Lifecycle engine wired to the fakes (no Keep Open button view)."""
    return LifecycleService(
        db=test_db,
        gateway=gateway,
        config=config,
        clock=clock,
        view_factory=None,
    )


def audit_actions(db, guild_id: int = GUILD_ID) -> List[str]:
    """Audit actions for a guild, oldest first."""
    return [row["action"] for row in reversed(db.get_audit_logs(guild_id, limit=500))]
