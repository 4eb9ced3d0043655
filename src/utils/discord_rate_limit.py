"""
Forum Steward - Discord Rate Limit Utilities
============================================

Rate limit handling and HTTP error logging for Discord API operations.

Features:
- Automatic retry on rate limit (429) errors
- Respects Discord's retry_after header
- Exponential backoff for 5xx errors
- Status-aware logging of HTTPException

Usage:
    from src.utils.discord_rate_limit import with_rate_limit_retry, log_http_error

    @with_rate_limit_retry(max_retries=2)
    async def lock(thread):
        await thread.edit(locked=True)

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
import random
from functools import wraps
from typing import Any, Callable, Optional

import discord

from src.core.logger import logger


# =============================================================================
# Configuration
# =============================================================================

class RateLimitConfig:
    """Configuration for Discord rate limit handling."""
    MAX_RETRIES: int = 3
    BASE_DELAY: float = 1.0  # seconds
    MAX_DELAY: float = 30.0  # seconds


# HTTP status code descriptions for logging
HTTP_STATUS_DESCRIPTIONS = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    429: "Rate Limited",
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
}


# =============================================================================
# Logging Helper
# =============================================================================

def log_http_error(
    e: discord.HTTPException,
    operation: str,
    context: Optional[list] = None,
) -> None:
    """
    Log a Discord HTTPException with comprehensive details.

    Args:
        e: The HTTPException that occurred
        operation: Description of what operation failed
        context: Additional context tuples for logging [(key, value), ...]
    """
    status_desc = HTTP_STATUS_DESCRIPTIONS.get(e.status, "Unknown")
    retry_after = getattr(e, "retry_after", None)

    log_items = [
        ("Status", f"{e.status} ({status_desc})"),
        ("Error", str(e.text) if getattr(e, "text", None) else str(e)),
    ]

    if retry_after:
        log_items.append(("Retry After", f"{retry_after:.1f}s"))

    if context:
        log_items.extend(context)

    # Rate limits, missing permissions and deleted threads are expected
    if e.status == 429:
        logger.warning(f"🚦 {operation} Rate Limited", log_items)
    elif e.status == 403:
        logger.warning(f"🚫 {operation} Forbidden", log_items)
    elif e.status == 404:
        logger.warning(f"❓ {operation} Not Found", log_items)
    else:
        logger.error(f"❌ {operation} Failed", log_items)


# =============================================================================
# Rate Limit Decorator
# =============================================================================

def _backoff(base_delay: float, try_index: int) -> float:
    delay = min(base_delay * (2 ** try_index), RateLimitConfig.MAX_DELAY)
    return delay + random.uniform(0, delay * 0.1)


def with_rate_limit_retry(
    max_retries: int = RateLimitConfig.MAX_RETRIES,
    base_delay: float = RateLimitConfig.BASE_DELAY,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator that retries a Discord call on rate limits and server errors.

    4xx errors other than 429 are raised immediately: a missing thread or
    permission will not fix itself on retry.

    Args:
        max_retries: Maximum attempts (including the first)
        base_delay: Base delay for exponential backoff

    Returns:
        Decorated function with rate limit handling
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            for try_index in range(max_retries):
                is_last = try_index == max_retries - 1
                try:
                    return await func(*args, **kwargs)

                except discord.RateLimited as e:
                    delay = e.retry_after + 0.5
                    logger.warning("Discord Rate Limited", [
                        ("Function", func.__name__),
                        ("Attempt", f"{try_index + 1}/{max_retries}"),
                        ("Retry After", f"{delay:.1f}s"),
                    ])
                    if is_last or delay >= RateLimitConfig.MAX_DELAY:
                        raise
                    await asyncio.sleep(delay)

                except discord.HTTPException as e:
                    if e.status == 429:
                        retry_after = getattr(e, "retry_after", None)
                        delay = retry_after + 0.5 if retry_after else _backoff(base_delay, try_index)
                    elif e.status >= 500:
                        delay = _backoff(base_delay, try_index)
                    else:
                        raise

                    logger.warning("Discord API Error", [
                        ("Function", func.__name__),
                        ("Attempt", f"{try_index + 1}/{max_retries}"),
                        ("Status", str(e.status)),
                        ("Retry In", f"{delay:.1f}s"),
                    ])
                    if is_last:
                        raise
                    await asyncio.sleep(delay)

            raise RuntimeError(f"{func.__name__} failed without exception")

        return wrapper

    return decorator


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "RateLimitConfig",
    "log_http_error",
    "with_rate_limit_retry",
]
