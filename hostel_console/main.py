"""Entrypoint for running the hostel console bot from the package.

This module wires up the Application, registers handlers and runs polling.
"""

from __future__ import annotations

import logging
from datetime import datetime

from telegram import BotCommand
from telegram.ext import Application, CommandHandler

from .logger import setup_logging
from . import config
from .commands import COMMANDS
from .handlers import dispatch
from .handlers.common import get_state

logger = logging.getLogger(__name__)

STARTUP_TIME = datetime.now()


def build_application() -> Application:
    if config.TOKEN is None:
        raise RuntimeError("BOT_TOKEN environment variable is not set")

    app = (
        Application.builder()
        .token(config.TOKEN)
        .post_init(on_startup)
        .post_shutdown(on_shutdown)
        .build()
    )

    get_state(app)

    for spec in COMMANDS:
        fn = getattr(dispatch, spec.handler)
        triggers = [spec.name, *spec.aliases]
        app.add_handler(CommandHandler(triggers, fn))

    return app


async def register_bot_commands(app: Application) -> None:
    """Register bot commands for Telegram autocomplete."""
    try:
        bot_commands = [BotCommand(spec.name, spec.description) for spec in COMMANDS]
        await app.bot.set_my_commands(bot_commands)
        logger.info("Registered %d commands for autocomplete", len(bot_commands))
    except Exception as e:
        logger.warning("Failed to register bot commands: %s", e)


async def on_startup(app: Application) -> None:
    """Register commands and notify allowed chats that the bot is up."""
    await register_bot_commands(app)

    if not config.ALLOWED:
        logger.warning("No ALLOWED_CHAT_IDS configured, skipping startup notification")
        return

    logger.info("Sending startup notification to %d chat(s)", len(config.ALLOWED))
    startup_msg = (
        f"🏨 Hostel console is up since {STARTUP_TIME.strftime('%Y-%m-%d %H:%M:%S')}\n"
        "Use /login to start a session."
    )
    for chat_id in config.ALLOWED:
        try:
            await app.bot.send_message(chat_id=chat_id, text=startup_msg)
        except Exception as e:
            logger.warning(
                "Failed to send startup notification to chat_id %s: %s", chat_id, e
            )


async def on_shutdown(app: Application) -> None:
    """Close every open console session and its HTTP client."""
    state = get_state(app)
    logger.info("Closing %d console session(s)", len(state.sessions))
    await state.close_all()


def run() -> None:
    setup_logging()
    logger.info("Starting hostel_console against %s", config.API_BASE_URL)
    app = build_application()

    # run polling; keep the stop_signals None so container shutdown behaves normally
    app.run_polling(stop_signals=None)


if __name__ == "__main__":
    run()
