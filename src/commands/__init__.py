"""
Forum Steward - Commands Package
================================

Slash command implementations for Forum Steward.
Commands are implemented as discord.py Cogs for modularity.

DESIGN:
    Each command package contains a Cog class with related commands.
    Cogs are loaded dynamically by the bot using load_extension().
    Cogs only check permissions and format replies; state changes go
    through the lifecycle engine on bot.lifecycle.

Available Commands:
    /resolved: Lock the post after a delay (owner or helper)
    /cancel: Cancel a pending lock or auto-close (owner or helper)
    /duplicate: Close the post as a duplicate (helper)
    /setup, /settings: Guild configuration (administrator)
    /link set|show|remove: Per-post reference link

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

# =============================================================================
# Command Cog Registry
# =============================================================================

COMMAND_COGS = [
    "src.commands.forum",
    "src.commands.setup",
    "src.commands.link",
]
"""
List of command cog module paths for dynamic loading.

DESIGN:
    Bot iterates this list and calls load_extension() for each.
    Add new command cogs here to have them loaded automatically.
"""


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "COMMAND_COGS",
]
