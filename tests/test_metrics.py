import time

import pytest

from conftest import DummyContext, DummyUpdate
from hostel_console import config
from hostel_console.handlers import common, meta
from hostel_console.handlers.common import get_state
from hostel_console.models.retry import RetryState


@pytest.mark.asyncio
async def test_rate_limit_records_success(monkeypatch) -> None:
    monkeypatch.setattr(config, "RATE_LIMIT_S", 0.0)
    monkeypatch.setattr(common, "_last_command_ts", 0.0)

    async def handler(update, context) -> None:
        return None

    wrapped = common.rate_limit(handler, name="demo")
    update = DummyUpdate(chat_id=123, user_id=123)
    context = DummyContext()

    await wrapped(update, context)

    metrics = get_state(context.application).command_metrics["demo"]
    assert metrics.count == 1
    assert metrics.success == 1
    assert metrics.error == 0


@pytest.mark.asyncio
async def test_rate_limit_records_error(monkeypatch) -> None:
    monkeypatch.setattr(config, "RATE_LIMIT_S", 0.0)
    monkeypatch.setattr(common, "_last_command_ts", 0.0)

    async def handler(update, context) -> None:
        raise RuntimeError("boom")

    wrapped = common.rate_limit(handler, name="boom")
    update = DummyUpdate(chat_id=123, user_id=123)
    context = DummyContext()

    with pytest.raises(RuntimeError):
        await wrapped(update, context)

    metrics = get_state(context.application).command_metrics["boom"]
    assert metrics.count == 1
    assert metrics.success == 0
    assert metrics.error == 1
    assert metrics.last_error == "boom"


@pytest.mark.asyncio
async def test_rate_limit_records_rate_limited(monkeypatch) -> None:
    monkeypatch.setattr(config, "RATE_LIMIT_S", 100.0)
    monkeypatch.setattr(common, "_last_command_ts", time.monotonic())

    async def handler(update, context) -> None:
        return None

    wrapped = common.rate_limit(handler, name="limited")
    update = DummyUpdate(chat_id=123, user_id=123)
    context = DummyContext()

    await wrapped(update, context)

    metrics = get_state(context.application).command_metrics["limited"]
    assert metrics.rate_limited == 1
    assert metrics.count == 0
    assert update.message.replies[0].startswith("⏱ Rate limit")


@pytest.mark.asyncio
async def test_metrics_command_hides_last_error(monkeypatch) -> None:
    monkeypatch.setattr(config, "ALLOWED", {123})
    update = DummyUpdate(chat_id=123, user_id=123)
    context = DummyContext()
    state = get_state(context.application)
    metrics = state.metrics_for("demo")
    metrics.count = 1
    metrics.error = 1
    metrics.last_error = "secret boom"

    await meta.cmd_metrics(update, context)

    assert update.message.replies
    assert "secret boom" not in update.message.replies[0]


def test_retry_sink_counts_retries() -> None:
    context = DummyContext()
    state = get_state(context.application)
    sink = state.debug_recorder().retry_sink("rooms")

    sink(RetryState(attempt=1, delay=1.0), RuntimeError("down"))
    sink(RetryState(attempt=2, delay=2.0), RuntimeError("down"))

    assert state.metrics_for("rooms").retries == 2
    entries = state.get_debug("rooms")["rooms"]
    assert entries[0].message == "retry 1 in 1.00s"
    assert "RuntimeError: down" in entries[0].details
