"""Shared handler helpers: auth guard, rate limit, console sessions, API errors."""

from __future__ import annotations

import functools
import html
import logging
import time
from typing import TYPE_CHECKING, Callable

from telegram.constants import ParseMode

from .. import config
from ..console import HostelConsole
from ..errors import (
    ApiError,
    AuthError,
    StaleResultError,
    TransientError,
    ValidationError,
)
from ..state import BOT_STATE_KEY, BotState, DebugRecorder

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from telegram import Update
    from telegram.ext import ContextTypes


# Global rate limit (seconds) for all commands.
_last_command_ts = 0.0
# We use a simple timestamp check. Since we are in asyncio,
# strictly speaking race conditions are only possible at await points.
# A simple float comparison is atomic enough for this use case.


def get_state(app) -> BotState:
    """Retrieve or initialize the bot state from application data.

    Args:
        app: The Telegram Application instance

    Returns:
        BotState object containing console sessions, metrics and debug entries.
    """
    return app.bot_data.setdefault(
        BOT_STATE_KEY, BotState(session_ttl_s=config.SESSION_TTL_S)
    )


def get_state_and_recorder(context) -> tuple[BotState, DebugRecorder]:
    state = get_state(context.application)
    return state, state.debug_recorder()


async def record_error(
    recorder,
    command: str,
    message: str,
    exc: Exception,
    reply,
    log: logging.Logger | None = None,
):
    (log or logger).exception(message)
    recorder.record(command, message, str(exc))
    await reply(f"❌ Error: {html.escape(str(exc))}", parse_mode=ParseMode.HTML)


def allowed(update: "Update") -> bool:
    """Check if the update sender is authorized to use the bot.

    Args:
        update: Telegram Update object containing chat information

    Returns:
        True if the chat ID is in the ALLOWED list, False otherwise.

    Note:
        Returns False if ALLOWED_CHAT_IDS is empty or update has no chat.
    """
    if not config.ALLOWED:
        return False
    if not update.effective_chat:
        return False
    chat_id = update.effective_chat.id
    effective_user = getattr(update, "effective_user", None)
    user_id = getattr(effective_user, "id", None)
    # Allow only private chats where chat_id == user_id and user is on the allowlist.
    if user_id is None:
        return chat_id in config.ALLOWED
    return chat_id == user_id and user_id in config.ALLOWED


async def guard(update: "Update", context: "ContextTypes.DEFAULT_TYPE") -> bool:
    """Guard function to check authorization before executing commands.

    Returns:
        True if authorized, False otherwise. Sends unauthorized message on failure.
    """
    if allowed(update):
        return True
    if update and update.effective_chat:
        await update.effective_chat.send_message("⛔ Not authorized")
    return False


async def require_console(
    update: "Update", context: "ContextTypes.DEFAULT_TYPE", command: str
) -> HostelConsole | None:
    """Guard plus a live console session for the chat.

    Replies with a login hint and returns None when the chat is not logged in
    or its session expired. Retries made by the returned console are counted
    under ``command``.
    """
    if not await guard(update, context):
        return None
    state, recorder = get_state_and_recorder(context)
    session = await state.get_session(update.effective_chat.id)
    if session is None:
        await update.message.reply_text("🔒 Not logged in. Use /login first.")
        return None
    session.console.on_retry = recorder.retry_sink(command)
    return session.console


async def handle_api_error(
    update: "Update",
    context: "ContextTypes.DEFAULT_TYPE",
    command: str,
    exc: Exception,
) -> None:
    """Turn a console failure into a user-facing reply.

    Auth failures end the chat's session. Superseded results are dropped
    silently. Anything that is not an :class:`ApiError` is recorded as an
    unexpected error.
    """
    state, recorder = get_state_and_recorder(context)
    reply = update.message.reply_text
    if isinstance(exc, StaleResultError):
        recorder.record(command, "discarded superseded result", exc.kind)
        return
    if isinstance(exc, AuthError):
        recorder.record(command, "auth failure", exc.message)
        await state.close_session(update.effective_chat.id)
        await reply(
            f"🔒 {html.escape(exc.message)}\nUse /login to start a new session.",
            parse_mode=ParseMode.HTML,
        )
        return
    if isinstance(exc, TransientError):
        recorder.record(command, "transient failure", exc.message)
        await reply(f"⏳ {html.escape(exc.message)}", parse_mode=ParseMode.HTML)
        return
    if isinstance(exc, ValidationError):
        recorder.record(command, "rejected", exc.message)
        await reply(f"❌ {html.escape(exc.message)}", parse_mode=ParseMode.HTML)
        return
    if isinstance(exc, ApiError):
        recorder.record(command, "api error", exc.message)
        await reply(f"❌ Error: {html.escape(exc.message)}", parse_mode=ParseMode.HTML)
        return
    await record_error(recorder, command, f"/{command} failed", exc, reply)


def rate_limit(func: Callable, name: str | None = None) -> Callable:
    """Decorator to enforce global rate limiting on command handlers.

    Args:
        func: The async command handler function to wrap

    Returns:
        Wrapped function that enforces rate limiting based on config.RATE_LIMIT_S

    Note:
        Uses a global timestamp check. Rate limit applies across all commands.
        If rate limit is exceeded, sends a message to the user with wait time.
    """

    command_name = name or func.__name__.removeprefix("cmd_")

    @functools.wraps(func)
    async def wrapper(
        update: "Update", context: "ContextTypes.DEFAULT_TYPE", *args, **kwargs
    ):
        global _last_command_ts
        now = time.monotonic()
        elapsed = now - _last_command_ts

        if elapsed < config.RATE_LIMIT_S:
            try:
                if update and getattr(update, "effective_message", None):
                    await update.effective_message.reply_text(
                        f"⏱ Rate limit: please wait {config.RATE_LIMIT_S - elapsed:.1f}s",
                    )
            except Exception as e:
                logger.debug("rate-limit notice failed to send: %s", e)
            try:
                state = get_state(context.application)
                state.record_rate_limited(command_name)
            except Exception as e:
                logger.debug("metrics rate-limit record failed: %s", e)
            return

        _last_command_ts = now
        start = time.perf_counter()
        try:
            result = await func(update, context, *args, **kwargs)
        except Exception as e:
            latency_s = time.perf_counter() - start
            try:
                state = get_state(context.application)
                state.record_command(
                    command_name, latency_s, ok=False, error_msg=str(e)
                )
            except Exception as metrics_error:
                logger.debug("metrics record failed: %s", metrics_error)
            raise
        else:
            latency_s = time.perf_counter() - start
            try:
                state = get_state(context.application)
                state.record_command(command_name, latency_s, ok=True, error_msg=None)
            except Exception as metrics_error:
                logger.debug("metrics record failed: %s", metrics_error)
            return result

    return wrapper


async def reply_usage(update: "Update", usage_html: str) -> None:
    await update.message.reply_text(
        f"<i>Usage:</i> {usage_html}", parse_mode=ParseMode.HTML
    )
