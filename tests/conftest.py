"""Shared test fixtures and dummy classes."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx

from hostel_console.api_client import HostelApiClient
from hostel_console.cache import TtlCache
from hostel_console.console import HostelConsole


class DummyChat:
    """Dummy Telegram chat for testing."""

    def __init__(self, chat_id: int, chat_type: str = "private") -> None:
        self.id = chat_id
        self.type = chat_type
        self.sent: list[str] = []

    async def send_message(self, text: str, **_: Any) -> None:
        self.sent.append(text)


class DummyUser:
    """Dummy Telegram user for testing."""

    def __init__(self, user_id: int, username: str | None = None) -> None:
        self.id = user_id
        self.username = username


class DummyMessage:
    """Dummy Telegram message for testing."""

    def __init__(self) -> None:
        self.replies: list[str] = []
        self.deleted = False

    async def reply_text(self, text: str, **_: Any) -> None:
        self.replies.append(text)

    async def delete(self) -> None:
        self.deleted = True


class DummyUpdate:
    """Dummy Telegram update for testing."""

    def __init__(self, chat_id: int, user_id: int) -> None:
        self.effective_chat = DummyChat(chat_id)
        self.effective_user = DummyUser(user_id)
        self.message = DummyMessage()
        self.effective_message = self.message


class DummyApplication:
    """Dummy Telegram application for testing."""

    def __init__(self) -> None:
        self.bot_data: dict[str, object] = {}


class DummyContext:
    """Dummy Telegram context for testing."""

    def __init__(self, args: list[str] | None = None) -> None:
        self.args = args or []
        self.application = DummyApplication()


class FakeClock:
    """Monotonic clock the tests can move forward by hand."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Stand-in for ``asyncio.sleep`` that records delays instead of waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def json_response(status: int, data: object = None) -> httpx.Response:
    if data is None:
        return httpx.Response(status)
    return httpx.Response(status, content=json.dumps(data).encode())


def make_console(
    handler: Callable[[httpx.Request], httpx.Response],
    token: str | None = "tok",
    clock: Callable[[], float] | None = None,
    sleep: RecordingSleep | None = None,
) -> HostelConsole:
    """Console over an in-memory transport; retries never really sleep."""
    client = HostelApiClient(
        "http://api.test",
        timeout_s=5.0,
        token=token,
        transport=httpx.MockTransport(handler),
    )
    cache = TtlCache(300, clock=clock) if clock is not None else TtlCache(300)
    return HostelConsole(client, cache=cache, sleep=sleep or RecordingSleep())
