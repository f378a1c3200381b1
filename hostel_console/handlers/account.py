from __future__ import annotations

import html
import logging

from telegram.constants import ParseMode

from .. import services, view
from ..errors import ApiError
from .common import (
    get_state,
    get_state_and_recorder,
    guard,
    handle_api_error,
    record_error,
    require_console,
)

logger = logging.getLogger(__name__)


def _format_remaining(seconds: float) -> str:
    minutes = int(seconds // 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


async def cmd_login(update, context) -> None:
    if not await guard(update, context):
        return
    state, recorder = get_state_and_recorder(context)
    if len(context.args) >= 2:
        email, password = context.args[0], " ".join(context.args[1:])
        # Drop the message carrying the password from the chat history.
        try:
            await update.message.delete()
        except Exception as e:
            logger.debug("could not delete login message: %s", e)
    else:
        creds = services.default_credentials()
        if creds is None:
            await update.message.reply_text(
                "Usage: /login <email> <password>\n"
                "(or set API_EMAIL and API_PASSWORD for a default account)"
            )
            return
        email, password = creds

    chat = update.effective_chat
    try:
        console, message = await services.login(
            email, password, on_retry=recorder.retry_sink("login")
        )
    except ApiError as e:
        recorder.record("login", "login failed", e.message)
        await chat.send_message(
            f"❌ Login failed: {html.escape(e.message)}", parse_mode=ParseMode.HTML
        )
        return
    except Exception as e:
        await record_error(recorder, "login", "Login failed", e, chat.send_message)
        return
    await state.open_session(chat.id, console, email)
    await chat.send_message(
        f"✅ {html.escape(message)}\nLogged in as {view.code(email)}.",
        parse_mode=ParseMode.HTML,
    )


async def cmd_logout(update, context) -> None:
    if not await guard(update, context):
        return
    state = get_state(context.application)
    if await state.close_session(update.effective_chat.id):
        await update.message.reply_text("👋 Logged out.")
    else:
        await update.message.reply_text("Not logged in.")


async def cmd_session(update, context) -> None:
    if not await guard(update, context):
        return
    state = get_state(context.application)
    session = await state.get_session(update.effective_chat.id)
    if session is None:
        await update.message.reply_text("🔒 Not logged in. Use /login first.")
        return
    msg = (
        f"{view.bold('Logged in as:')} {view.code(session.email)}\n"
        f"{view.bold('Expires in:')} {_format_remaining(session.remaining_s())}"
    )
    await update.message.reply_text(msg, parse_mode=ParseMode.HTML)


async def cmd_profile(update, context) -> None:
    console = await require_console(update, context, "profile")
    if console is None:
        return
    try:
        profile = await console.profile()
    except Exception as e:
        await handle_api_error(update, context, "profile", e)
        return
    await update.message.reply_text(
        view.render_profile(profile), parse_mode=ParseMode.HTML
    )


async def cmd_refresh(update, context) -> None:
    console = await require_console(update, context, "refresh")
    if console is None:
        return
    dropped = len(console.cache)
    console.cache.clear()
    await update.message.reply_text(f"🔄 Cleared {dropped} cached item(s).")
