import pytest

from conftest import DummyContext, DummyUpdate, json_response, make_console
from hostel_console import config, services
from hostel_console.errors import AuthError
from hostel_console.handlers import account
from hostel_console.handlers.common import get_state


@pytest.fixture
def allowed(monkeypatch):
    monkeypatch.setattr(config, "ALLOWED", {123})


@pytest.mark.asyncio
async def test_login_opens_session_and_deletes_password(monkeypatch, allowed) -> None:
    calls: list[tuple[str, str]] = []

    async def fake_login(email, password, on_retry=None, transport=None):
        calls.append((email, password))
        console = make_console(lambda request: json_response(200, {}))
        return console, "Welcome"

    monkeypatch.setattr(services, "login", fake_login)
    update = DummyUpdate(chat_id=123, user_id=123)
    context = DummyContext(args=["admin@example.com", "s3cret"])

    await account.cmd_login(update, context)

    assert calls == [("admin@example.com", "s3cret")]
    assert update.message.deleted
    assert "Welcome" in update.effective_chat.sent[0]
    session = await get_state(context.application).get_session(123)
    assert session is not None
    assert session.email == "admin@example.com"
    await get_state(context.application).close_all()


@pytest.mark.asyncio
async def test_login_uses_configured_credentials(monkeypatch, allowed) -> None:
    monkeypatch.setattr(config, "API_EMAIL", "default@example.com")
    monkeypatch.setattr(config, "API_PASSWORD", "pw")
    seen: list[str] = []

    async def fake_login(email, password, on_retry=None, transport=None):
        seen.append(email)
        return make_console(lambda request: json_response(200, {})), "ok"

    monkeypatch.setattr(services, "login", fake_login)
    update = DummyUpdate(chat_id=123, user_id=123)
    context = DummyContext()

    await account.cmd_login(update, context)

    assert seen == ["default@example.com"]
    assert not update.message.deleted
    await get_state(context.application).close_all()


@pytest.mark.asyncio
async def test_login_without_credentials_shows_usage(monkeypatch, allowed) -> None:
    monkeypatch.setattr(config, "API_EMAIL", None)
    monkeypatch.setattr(config, "API_PASSWORD", None)
    update = DummyUpdate(chat_id=123, user_id=123)
    context = DummyContext()

    await account.cmd_login(update, context)

    assert update.message.replies[0].startswith("Usage: /login")


@pytest.mark.asyncio
async def test_login_failure_reports_server_message(monkeypatch, allowed) -> None:
    async def fake_login(email, password, on_retry=None, transport=None):
        raise AuthError("Invalid credentials", 401)

    monkeypatch.setattr(services, "login", fake_login)
    update = DummyUpdate(chat_id=123, user_id=123)
    context = DummyContext(args=["admin@example.com", "bad"])

    await account.cmd_login(update, context)

    assert update.effective_chat.sent == ["❌ Login failed: Invalid credentials"]
    assert await get_state(context.application).get_session(123) is None
    debug = get_state(context.application).get_debug("login")
    assert debug["login"][0].message == "login failed"


@pytest.mark.asyncio
async def test_login_rejects_unauthorized_chat(monkeypatch, allowed) -> None:
    update = DummyUpdate(chat_id=999, user_id=999)
    context = DummyContext(args=["a@b.c", "pw"])

    await account.cmd_login(update, context)

    assert update.effective_chat.sent == ["⛔ Not authorized"]


@pytest.mark.asyncio
async def test_logout_closes_session(allowed) -> None:
    update = DummyUpdate(chat_id=123, user_id=123)
    context = DummyContext()
    state = get_state(context.application)
    console = make_console(lambda request: json_response(200, {}))
    await state.open_session(123, console, "admin@example.com")

    await account.cmd_logout(update, context)

    assert update.message.replies == ["👋 Logged out."]
    assert 123 not in state.sessions
    assert not console.client.authenticated


@pytest.mark.asyncio
async def test_session_expires(allowed) -> None:
    update = DummyUpdate(chat_id=123, user_id=123)
    context = DummyContext()
    state = get_state(context.application)
    state.session_ttl_s = 0
    await state.open_session(
        123, make_console(lambda request: json_response(200, {})), "a@b.c"
    )

    await account.cmd_session(update, context)

    assert "Not logged in" in update.message.replies[0]
    assert 123 not in state.sessions


@pytest.mark.asyncio
async def test_session_reports_account(allowed) -> None:
    update = DummyUpdate(chat_id=123, user_id=123)
    context = DummyContext()
    state = get_state(context.application)
    await state.open_session(
        123, make_console(lambda request: json_response(200, {})), "a@b.c"
    )

    await account.cmd_session(update, context)

    assert "a@b.c" in update.message.replies[0]
    assert "Expires in:" in update.message.replies[0]
    await state.close_all()


@pytest.mark.asyncio
async def test_profile_and_refresh(allowed) -> None:
    update = DummyUpdate(chat_id=123, user_id=123)
    context = DummyContext()
    state = get_state(context.application)
    console = make_console(
        lambda request: json_response(
            200, {"profileInfo": {"name": "Warden", "email": "w@example.com"}}
        )
    )
    await state.open_session(123, console, "w@example.com")

    await account.cmd_profile(update, context)
    await account.cmd_refresh(update, context)

    assert "Warden" in update.message.replies[0]
    assert update.message.replies[1] == "🔄 Cleared 1 cached item(s)."
    assert len(console.cache) == 0
    await state.close_all()
