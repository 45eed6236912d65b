from __future__ import annotations

import logging
import signal

from fastapi import FastAPI, Request
from telegram import Update
from telegram.ext import ApplicationBuilder

from handlers.router import register_handlers

from app.config import DROP_PENDING_UPDATES, LOG_LEVEL, require_env, webhook_base


logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


token = require_env("BOT_TOKEN")
webhook_url = webhook_base()
if not webhook_url:
    raise RuntimeError("WEBHOOK_URL environment variable is not set")

logger.info("Using webhook base URL %s", webhook_url)


def _handle_exit(sig: int, frame: object | None) -> None:
    logger.info("Received shutdown signal %s", sig)


signal.signal(signal.SIGTERM, _handle_exit)
signal.signal(signal.SIGINT, _handle_exit)

# webhook mode only; the built-in Updater would start long-polling
bot_app = register_handlers(ApplicationBuilder().token(token).updater(None).build())


app = FastAPI()


@app.on_event("startup")
async def on_startup() -> None:
    logger.info("Starting bot application")
    try:
        await bot_app.initialize()
        await bot_app.start()
        webhook = f"{webhook_url}/webhook"
        await bot_app.bot.set_webhook(webhook, drop_pending_updates=DROP_PENDING_UPDATES)
        logger.info("Webhook set to %s", webhook)
    except Exception:
        logger.exception("Failed during startup")
        raise
    else:
        logger.info("Bot application started successfully")


@app.on_event("shutdown")
async def on_shutdown() -> None:
    logger.info("Shutting down bot application")
    try:
        await bot_app.bot.delete_webhook()
        await bot_app.stop()
        await bot_app.shutdown()
    except Exception:
        logger.exception("Error during shutdown")
        raise
    else:
        logger.info("Bot application stopped")


@app.post("/webhook")
async def telegram_webhook(request: Request) -> dict[str, bool]:
    update = Update.de_json(await request.json(), bot_app.bot)
    await bot_app.process_update(update)
    return {"ok": True}


@app.api_route("/", methods=["GET", "HEAD"])
async def root() -> dict[str, str]:
    return {"status": "running"}


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    """Health-check endpoint for the hosting platform."""
    return {"status": "ok"}
