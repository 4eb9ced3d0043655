"""
Forum Steward - Configuration Module
====================================

Centralized configuration management with environment variable validation.

DESIGN:
    Process-wide settings (token, lifecycle windows, sweep intervals) are
    loaded from environment variables at startup. Per-guild settings (forum,
    tags, helper roles) live in the database and are read on every
    lifecycle decision, never cached here.

    Key patterns:
    - Singleton pattern via get_config() ensures one Config instance
    - Validation happens once at load time, not on every access
    - Permission helpers centralize authorization logic

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import os
from dataclasses import dataclass
from typing import Iterable, Optional, Set
from zoneinfo import ZoneInfo

from src.core.constants import (
    DEFAULT_RESOLVE_DELAY_MINUTES,
    MAX_RESOLVE_DELAY_MINUTES,
    STALE_WARNING_DAYS,
    STALE_CLOSE_DAYS,
    LOCK_SWEEP_INTERVAL,
    STALE_SWEEP_INTERVAL,
    GATEWAY_TIMEOUT,
    HEALTH_CHECK_PORT,
    SNOWFLAKE_MAX,
    SECONDS_PER_MINUTE,
    SECONDS_PER_DAY,
)


# =============================================================================
# Timezone Configuration
# =============================================================================

NY_TZ = ZoneInfo("America/New_York")
"""Eastern timezone for log timestamps and user-facing dates."""


# =============================================================================
# Configuration Dataclass
# =============================================================================

@dataclass
class Config:
    """
    Bot configuration loaded from environment variables.

    DESIGN:
        Only the token is required. Every lifecycle window and interval
        has a default matching the production values, so tests can build
        a Config directly with keyword overrides.

    Attributes:
        discord_token: Discord bot authentication token.
        developer_id: User ID that always passes staff checks.
        resolve_delay_minutes: Delay between /resolved and the lock.
        stale_warning_days: Idle days before the owner is warned.
        stale_close_days: Idle days before a warned thread is closed.
        lock_sweep_interval: Seconds between resolve-lock sweeps.
        stale_sweep_interval: Seconds between stale sweeps.
        gateway_timeout: Seconds allowed for any single Discord call.
    """

    # -------------------------------------------------------------------------
    # Required: Discord
    # -------------------------------------------------------------------------

    discord_token: str

    # -------------------------------------------------------------------------
    # Optional: Permissions
    # -------------------------------------------------------------------------

    developer_id: Optional[int] = None

    # -------------------------------------------------------------------------
    # Optional: Lifecycle Windows
    # -------------------------------------------------------------------------

    resolve_delay_minutes: int = DEFAULT_RESOLVE_DELAY_MINUTES
    stale_warning_days: int = STALE_WARNING_DAYS
    stale_close_days: int = STALE_CLOSE_DAYS

    # -------------------------------------------------------------------------
    # Optional: Scheduler Intervals (seconds)
    # -------------------------------------------------------------------------

    lock_sweep_interval: int = LOCK_SWEEP_INTERVAL
    stale_sweep_interval: int = STALE_SWEEP_INTERVAL
    gateway_timeout: float = GATEWAY_TIMEOUT
    backfill_enabled: bool = True

    # -------------------------------------------------------------------------
    # Optional: Operations
    # -------------------------------------------------------------------------

    health_check_port: int = HEALTH_CHECK_PORT
    error_webhook_url: Optional[str] = None
    dev_guild_id: Optional[int] = None

    # -------------------------------------------------------------------------
    # Derived Windows
    # -------------------------------------------------------------------------

    @property
    def resolve_delay_seconds(self) -> int:
        return self.resolve_delay_minutes * SECONDS_PER_MINUTE

    @property
    def stale_warning_seconds(self) -> int:
        return self.stale_warning_days * SECONDS_PER_DAY

    @property
    def stale_close_seconds(self) -> int:
        # A warned thread can never be closed before it could be warned
        return max(self.stale_close_days, self.stale_warning_days) * SECONDS_PER_DAY

    @property
    def stale_grace_seconds(self) -> int:
        """Minimum time between a stale warning and the auto-close."""
        return self.stale_close_seconds - self.stale_warning_seconds


# =============================================================================
# Embed Colors
# =============================================================================

class EmbedColors:
    """Standardized color palette for Discord embeds."""

    GREEN = 0x1F5E2E    # Resolved, renewed
    GOLD = 0xE6B84A     # Warnings
    ORANGE = 0xFFA500   # Duplicates
    RED = 0xDC3545      # Closures
    BLURPLE = 0x5865F2  # Welcome / info

    SUCCESS = GREEN
    WARNING = GOLD
    INFO = BLURPLE
    DUPLICATE = ORANGE
    CLOSED = RED


# =============================================================================
# Validation
# =============================================================================

class ConfigValidationError(Exception):
    """Raised when required configuration is missing or invalid."""

    pass


def _parse_int_optional(value: Optional[str]) -> Optional[int]:
    """Parse optional string to integer, returning None on failure."""
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _parse_int_with_default(
    value: Optional[str],
    default: int,
    name: str,
    min_val: Optional[int] = None,
    max_val: Optional[int] = None,
) -> int:
    """
    Parse optional integer with default and range validation.

    Args:
        value: String value from environment variable.
        default: Default value if not set or invalid.
        name: Variable name for warning messages.
        min_val: Minimum allowed value (inclusive).
        max_val: Maximum allowed value (inclusive).

    Returns:
        Parsed integer within valid range, or default.
    """
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        from src.core.logger import logger
        logger.warning(f"Config {name}='{value}' invalid, using default {default}")
        return default
    if min_val is not None and parsed < min_val:
        from src.core.logger import logger
        logger.warning(f"Config {name}={parsed} below min {min_val}, using {min_val}")
        return min_val
    if max_val is not None and parsed > max_val:
        from src.core.logger import logger
        logger.warning(f"Config {name}={parsed} above max {max_val}, using {max_val}")
        return max_val
    return parsed


def _parse_bool(value: Optional[str], default: bool) -> bool:
    """Parse a truthy/falsy environment string."""
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "y", "on")


def _validate_url(value: Optional[str], name: str) -> Optional[str]:
    """Validate URL format for webhooks, returning None if invalid."""
    if not value:
        return None
    if not value.startswith(("https://", "http://")):
        from src.core.logger import logger
        logger.warning(f"Config {name} invalid URL format, ignoring")
        return None
    return value


def parse_id_set(value: Optional[str]) -> Set[int]:
    """
    Parse comma-separated string to set of integers.

    Args:
        value: Comma-separated string of integers (e.g., "123,456,789").

    Returns:
        Set of parsed integers, empty set if input is None or empty.
    """
    if not value:
        return set()
    result = set()
    for part in value.split(","):
        part = part.strip().strip("<@&>")
        if part:
            try:
                parsed = int(part)
            except ValueError:
                continue  # Skip invalid entries silently
            if 0 < parsed <= SNOWFLAKE_MAX:
                result.add(parsed)
    return result


def encode_id_set(ids: Iterable[int]) -> str:
    """Encode a set of IDs as a sorted comma-separated string."""
    return ",".join(str(i) for i in sorted(set(ids)))


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config() -> Config:
    """
    Load and validate configuration from environment variables.

    Returns:
        Validated Config object with all settings.

    Raises:
        ConfigValidationError: If the token is missing.
    """
    discord_token = os.getenv("DISCORD_TOKEN")
    if not discord_token:
        raise ConfigValidationError("Missing required environment variables: DISCORD_TOKEN")

    stale_warning_days = _parse_int_with_default(
        os.getenv("STALE_WARNING_DAYS"), STALE_WARNING_DAYS, "STALE_WARNING_DAYS", min_val=1, max_val=365
    )
    stale_close_days = _parse_int_with_default(
        os.getenv("STALE_CLOSE_DAYS"), STALE_CLOSE_DAYS, "STALE_CLOSE_DAYS", min_val=1, max_val=365
    )
    if stale_close_days < stale_warning_days:
        from src.core.logger import logger
        logger.warning(
            f"Config STALE_CLOSE_DAYS={stale_close_days} shorter than warning window, "
            f"using {stale_warning_days}"
        )
        stale_close_days = stale_warning_days

    return Config(
        discord_token=discord_token,
        developer_id=_parse_int_optional(os.getenv("DEVELOPER_ID")),
        resolve_delay_minutes=_parse_int_with_default(
            os.getenv("RESOLVE_DELAY_MINUTES"), DEFAULT_RESOLVE_DELAY_MINUTES,
            "RESOLVE_DELAY_MINUTES", min_val=0, max_val=MAX_RESOLVE_DELAY_MINUTES,
        ),
        stale_warning_days=stale_warning_days,
        stale_close_days=stale_close_days,
        lock_sweep_interval=_parse_int_with_default(
            os.getenv("LOCK_SWEEP_INTERVAL"), LOCK_SWEEP_INTERVAL, "LOCK_SWEEP_INTERVAL", min_val=5, max_val=3600
        ),
        stale_sweep_interval=_parse_int_with_default(
            os.getenv("STALE_SWEEP_INTERVAL"), STALE_SWEEP_INTERVAL, "STALE_SWEEP_INTERVAL",
            min_val=60, max_val=SECONDS_PER_DAY,
        ),
        gateway_timeout=_parse_int_with_default(
            os.getenv("GATEWAY_TIMEOUT"), GATEWAY_TIMEOUT, "GATEWAY_TIMEOUT", min_val=1, max_val=120
        ),
        backfill_enabled=_parse_bool(os.getenv("BACKFILL_ENABLED"), True),
        health_check_port=_parse_int_with_default(
            os.getenv("HEALTH_CHECK_PORT"), HEALTH_CHECK_PORT, "HEALTH_CHECK_PORT", min_val=0, max_val=65535
        ),
        error_webhook_url=_validate_url(os.getenv("ERROR_WEBHOOK_URL"), "ERROR_WEBHOOK_URL"),
        dev_guild_id=_parse_int_optional(os.getenv("DEV_GUILD_ID")),
    )


# =============================================================================
# Global Config Instance
# =============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance, loading if needed.

    Raises:
        ConfigValidationError: On first call if config is invalid.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def validate_and_log_config() -> None:
    """
    Validate configuration and log results at startup.

    Raises:
        ConfigValidationError: If required configuration is missing.
    """
    from src.core.logger import logger

    config = get_config()

    logger.tree_nested("Configuration Validated", [
        ("Lifecycle Windows", [
            ("Resolve Delay", f"{config.resolve_delay_minutes}m"),
            ("Stale Warning", f"{config.stale_warning_days}d"),
            ("Stale Close", f"{config.stale_close_days}d"),
        ]),
        ("Scheduler", [
            ("Lock Sweep", f"every {config.lock_sweep_interval}s"),
            ("Stale Sweep", f"every {config.stale_sweep_interval}s"),
            ("Gateway Timeout", f"{config.gateway_timeout}s"),
            ("Backfill", "Enabled" if config.backfill_enabled else "Disabled"),
        ]),
        ("Monitoring", [
            ("Health Port", str(config.health_check_port or "Disabled")),
            ("Error Webhook", "Enabled" if config.error_webhook_url else "Disabled"),
        ]),
    ], emoji="⚙️")


# =============================================================================
# Permission Helpers
# =============================================================================

def is_developer(user_id: int) -> bool:
    """Check if user is the bot developer."""
    developer_id = get_config().developer_id
    return developer_id is not None and user_id == developer_id


def is_helper(member, helper_role_ids: Iterable[int]) -> bool:
    """
    Check if a member may act as a forum helper.

    Args:
        member: Discord member object to check.
        helper_role_ids: Helper role IDs from the guild's settings.

    Returns:
        True for the developer, administrators, members with
        manage_threads, or members holding any helper role.
    """
    if member is None:
        return False

    if is_developer(member.id):
        return True

    permissions = getattr(member, "guild_permissions", None)
    if permissions is not None and (permissions.administrator or permissions.manage_threads):
        return True

    helper_roles = set(helper_role_ids)
    return any(role.id in helper_roles for role in getattr(member, "roles", []))


def is_thread_owner(user_id: int, thread) -> bool:
    """Check if a user created the given thread."""
    return thread is not None and getattr(thread, "owner_id", None) == user_id


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "Config",
    "ConfigValidationError",
    "EmbedColors",
    "NY_TZ",
    "get_config",
    "load_config",
    "validate_and_log_config",
    "parse_id_set",
    "encode_id_set",
    "is_developer",
    "is_helper",
    "is_thread_owner",
]
