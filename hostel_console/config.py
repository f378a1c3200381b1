"""Central configuration for hostel_console."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Set

logger = logging.getLogger(__name__)


def _split_ints(s: str) -> Set[int]:
    """Parse comma-separated string into a set of integers.

    Args:
        s: Comma-separated string of integers (e.g., "123,456,789")

    Returns:
        Set of parsed integers. Invalid entries are silently skipped.

    Example:
        >>> _split_ints("123,456,invalid,789")
        {123, 456, 789}
    """
    out = set()
    for part in (s or "").split(","):
        p = part.strip()
        if p.isdigit():
            out.add(int(p))
    return out


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.environ.get(name, "") or default)
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    raw = (os.environ.get(name) or "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


@dataclass
class Settings:
    """Configuration settings for hostel_console.

    All settings are loaded from environment variables with sensible defaults.
    """

    BOT_TOKEN: str | None
    ALLOWED_CHAT_IDS: Set[int]
    RATE_LIMIT_S: float
    API_BASE_URL: str
    API_TIMEOUT_S: float
    API_EMAIL: str | None
    API_PASSWORD: str | None
    RETRY_MAX_ATTEMPTS: int
    RETRY_INITIAL_DELAY_S: float
    RETRY_MAX_DELAY_S: float
    CACHE_MAX_AGE_S: float
    SESSION_TTL_S: float


def _read_settings() -> Settings:
    """Read all configuration from environment variables.

    Returns:
        Settings object with all configuration values.

    Note:
        Invalid numeric values fall back to sensible defaults.
    """
    token = os.environ.get("BOT_TOKEN") or None
    allowed = _split_ints(os.environ.get("ALLOWED_CHAT_IDS", ""))
    rate_limit = _float_env("RATE_LIMIT_S", 1.0)

    # Hostel REST API
    base_url = (os.environ.get("API_BASE_URL") or "http://localhost:5000").rstrip("/")
    api_timeout = _float_env("API_TIMEOUT_S", 30.0)
    api_email = os.environ.get("API_EMAIL") or None
    api_password = os.environ.get("API_PASSWORD") or None

    # Retry / cache
    retry_attempts = max(1, _int_env("RETRY_MAX_ATTEMPTS", 3))
    retry_initial = _float_env("RETRY_INITIAL_DELAY_S", 1.0)
    retry_max = _float_env("RETRY_MAX_DELAY_S", 10.0)
    cache_max_age = _float_env("CACHE_MAX_AGE_S", 300.0)
    session_ttl = _float_env("SESSION_TTL_S", 6 * 60 * 60)

    return Settings(
        BOT_TOKEN=token,
        ALLOWED_CHAT_IDS=allowed,
        RATE_LIMIT_S=rate_limit,
        API_BASE_URL=base_url,
        API_TIMEOUT_S=api_timeout,
        API_EMAIL=api_email,
        API_PASSWORD=api_password,
        RETRY_MAX_ATTEMPTS=retry_attempts,
        RETRY_INITIAL_DELAY_S=retry_initial,
        RETRY_MAX_DELAY_S=retry_max,
        CACHE_MAX_AGE_S=cache_max_age,
        SESSION_TTL_S=session_ttl,
    )


settings = _read_settings()


def validate_settings() -> None:
    """Validate critical configuration and log warnings for issues."""
    if settings.BOT_TOKEN is None:
        logger.error("BOT_TOKEN environment variable is not set")
    if not settings.ALLOWED_CHAT_IDS:
        logger.warning(
            "ALLOWED_CHAT_IDS is empty; guarded commands will be unauthorized."
        )
    if not (settings.API_EMAIL and settings.API_PASSWORD):
        logger.info("API_EMAIL/API_PASSWORD not set; /login needs explicit credentials.")
    if settings.RETRY_INITIAL_DELAY_S > settings.RETRY_MAX_DELAY_S:
        logger.warning(
            "RETRY_INITIAL_DELAY_S (%.1f) exceeds RETRY_MAX_DELAY_S (%.1f)",
            settings.RETRY_INITIAL_DELAY_S,
            settings.RETRY_MAX_DELAY_S,
        )


# Exported constants
TOKEN: str | None = settings.BOT_TOKEN
ALLOWED: set[int] = settings.ALLOWED_CHAT_IDS
RATE_LIMIT_S: float = settings.RATE_LIMIT_S
API_BASE_URL: str = settings.API_BASE_URL
API_TIMEOUT_S: float = settings.API_TIMEOUT_S
API_EMAIL: str | None = settings.API_EMAIL
API_PASSWORD: str | None = settings.API_PASSWORD
RETRY_MAX_ATTEMPTS: int = settings.RETRY_MAX_ATTEMPTS
RETRY_INITIAL_DELAY_S: float = settings.RETRY_INITIAL_DELAY_S
RETRY_MAX_DELAY_S: float = settings.RETRY_MAX_DELAY_S
CACHE_MAX_AGE_S: float = settings.CACHE_MAX_AGE_S
SESSION_TTL_S: float = settings.SESSION_TTL_S

validate_settings()
