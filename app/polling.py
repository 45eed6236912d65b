"""Run the bot with long-polling for local development."""
from __future__ import annotations

import logging

from telegram.ext import ApplicationBuilder

from handlers.router import register_handlers

from app.config import LOG_LEVEL, require_env


def main() -> None:
    logging.basicConfig(level=LOG_LEVEL)
    token = require_env("BOT_TOKEN")
    application = register_handlers(ApplicationBuilder().token(token).build())
    application.run_polling()


if __name__ == "__main__":
    main()
