"""
Forum Steward - Source Package
==============================

Forum help-channel steward for Discord. Welcomes new posts, locks
resolved ones, closes duplicates and retires threads that went quiet.

Package Structure:
- bot.py: Main Discord bot class and startup sequence
- commands/: Slash command cogs (/resolved, /cancel, /duplicate, /setup, /link)
- core/: Configuration, logging, database and health server
- events/: Listener cogs feeding the lifecycle engine
- services/: Lifecycle engine and scheduler
- utils/: Helper functions and utilities

Author: حَـــــنَّـــــا
Server: discord.gg/syria
Version: v1.0.0
"""
