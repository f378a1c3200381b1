"""Construction of per-chat consoles from configuration.

Consoles are created at login and owned by the chat's session; nothing here
keeps module-level state.
"""

from __future__ import annotations

import logging
from typing import Callable

import httpx

from . import config
from .api_client import HostelApiClient
from .cache import TtlCache
from .console import HostelConsole
from .models.retry import RetryState

logger = logging.getLogger(__name__)


def build_console(
    token: str | None = None,
    on_retry: Callable[[RetryState, Exception], None] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> HostelConsole:
    """Build a console wired with the configured API, retry and cache settings."""
    client = HostelApiClient(
        config.API_BASE_URL,
        timeout_s=config.API_TIMEOUT_S,
        token=token,
        transport=transport,
    )
    return HostelConsole(
        client,
        cache=TtlCache(config.CACHE_MAX_AGE_S),
        max_retries=config.RETRY_MAX_ATTEMPTS,
        initial_delay_s=config.RETRY_INITIAL_DELAY_S,
        max_delay_s=config.RETRY_MAX_DELAY_S,
        on_retry=on_retry,
    )


def default_credentials() -> tuple[str, str] | None:
    if config.API_EMAIL and config.API_PASSWORD:
        return config.API_EMAIL, config.API_PASSWORD
    return None


async def login(
    email: str,
    password: str,
    on_retry: Callable[[RetryState, Exception], None] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> tuple[HostelConsole, str]:
    """Log in and return a ready console plus the server's message.

    The login call is retried on transient failures like any read; the
    console's client is closed again if login does not succeed.
    """
    console = build_console(on_retry=on_retry, transport=transport)
    try:
        message = await console.login(email, password)
    except Exception:
        await console.teardown()
        raise
    return console, message


__all__ = ["build_console", "default_credentials", "login"]
