"""
Forum Steward - Centralized Constants
=====================================

All magic numbers and constants are defined here for maintainability.
Import from this module instead of hardcoding values.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

# =============================================================================
# Time Constants (in seconds)
# =============================================================================

# Base time units
SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400

# =============================================================================
# Network Constants
# =============================================================================

# Health check server port
HEALTH_CHECK_PORT = 8085

# Webhook request timeout
WEBHOOK_TIMEOUT = 10

# =============================================================================
# Thread Lifecycle Defaults
# =============================================================================

DEFAULT_RESOLVE_DELAY_MINUTES = 30    # /resolved -> lock
MAX_RESOLVE_DELAY_MINUTES = 10080     # 7 days
STALE_WARNING_DAYS = 24               # Idle days before the owner is warned
STALE_CLOSE_DAYS = 30                 # Idle days before a warned thread is closed

# =============================================================================
# Interval Constants (in seconds)
# =============================================================================

LOCK_SWEEP_INTERVAL = 60              # Fire due resolve-locks
STALE_SWEEP_INTERVAL = 6 * SECONDS_PER_HOUR  # Warn / auto-close idle threads
SCHEDULER_RETRY_DELAY = 30            # Back-off after a failed sweep pass

# =============================================================================
# Timeout Constants (in seconds)
# =============================================================================

GATEWAY_TIMEOUT = 10                  # Bound on every Discord call made by the engine
SHUTDOWN_TIMEOUT = 10                 # Graceful shutdown timeout
DB_CONNECTION_TIMEOUT = 30.0          # sqlite3.connect timeout
SQLITE_BUSY_TIMEOUT = 5000            # PRAGMA busy_timeout (ms)

# =============================================================================
# Limits
# =============================================================================

LOG_TRUNCATE_LENGTH = 100             # Error text in log trees
AUDIT_DETAILS_MAX_LENGTH = 1000       # Stored audit detail text
MAX_FORUM_TAGS = 5                    # Discord limit on applied tags per thread
SNOWFLAKE_MAX = 9223372036854775807

# =============================================================================
# Audit Actions
# =============================================================================

ACTION_GREET = "GREET"
ACTION_ANSWERED = "ANSWERED"
ACTION_RESOLVED = "RESOLVED"
ACTION_LOCK = "LOCK"
ACTION_CANCEL = "CANCEL"
ACTION_THREAD_RENEWED = "THREAD_RENEWED"
ACTION_DUPLICATE = "DUPLICATE"
ACTION_STALE_WARNING = "STALE_WARNING"
ACTION_AUTO_CLOSE = "AUTO_CLOSE"
ACTION_SETUP = "SETUP"
ACTION_LINK_SET = "LINK_SET"
ACTION_LINK_REMOVED = "LINK_REMOVED"
ACTION_DENIED = "DENIED"

# =============================================================================
# Custom IDs
# =============================================================================

KEEP_OPEN_CUSTOM_ID_PREFIX = "steward_keep"
