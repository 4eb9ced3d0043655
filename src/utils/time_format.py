"""
Forum Steward - Time Formatting Utils
=====================================

Time formatting utilities for human-readable duration display.

Features:
- Convert minutes to days, hours, minutes format
- Discord dynamic timestamps (<t:...:R>) for embeds

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""


def format_duration(total_minutes: int) -> str:
    """
    Format minutes into a human-readable duration string.

    Args:
        total_minutes: Total number of minutes to format

    Returns:
        Compact string such as "45m", "2h 5m" or "1d 1h".
        Zero or negative input returns "0m".
    """
    if not total_minutes or total_minutes < 0:
        return "0m"

    days: int = total_minutes // (24 * 60)
    remaining: int = total_minutes % (24 * 60)
    hours: int = remaining // 60
    minutes: int = remaining % 60

    parts: list[str] = []

    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    # Minutes are the fallback so the string is never empty
    if minutes > 0 or (days == 0 and hours == 0):
        parts.append(f"{minutes}m")

    return " ".join(parts)


def discord_timestamp(epoch_seconds: float, style: str = "R") -> str:
    """
    Render a Discord dynamic timestamp.

    Args:
        epoch_seconds: Unix time in seconds.
        style: Discord style flag (R relative, f full, D date).

    Returns:
        Markup like "<t:1700000000:R>".
    """
    return f"<t:{int(epoch_seconds)}:{style}>"


__all__ = ["format_duration", "discord_timestamp"]
