from __future__ import annotations
import logging

from telegram.ext import Application, CommandHandler, ContextTypes

from handlers.commands import COMMANDS
from sessions import REGISTRY_KEY, BoardRegistry


logger = logging.getLogger(__name__)


async def handle_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    logger.error("Exception while handling update %s", update, exc_info=context.error)


def register_handlers(application: Application) -> Application:
    """Attach bingo commands, the board registry and the error handler."""
    for names, callback in COMMANDS:
        application.add_handler(CommandHandler(names, callback))
    application.add_error_handler(handle_error)
    application.bot_data[REGISTRY_KEY] = BoardRegistry()
    return application


__all__ = ["handle_error", "register_handlers"]
