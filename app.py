import logging
import os
import socket
from typing import Optional
from urllib.parse import urlparse

from fastapi import FastAPI, Request, HTTPException, Response
from fastapi.responses import JSONResponse
from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
)
from telegram.error import TelegramError

import tic_tac_toe
from tic_tac_toe.handlers.lobby import HELP_TEXT

from shared.logging_utils import configure_logging


TOKEN = os.environ.get("TELEGRAM_BOT_TOKEN")
PUBLIC_URL = os.environ.get("PUBLIC_URL")
WEBHOOK_SECRET = os.environ.get("WEBHOOK_SECRET", "")
WEBHOOK_PATH = os.environ.get("WEBHOOK_PATH", "/webhook")
ALLOWED_UPDATES = ["message", "callback_query"]

configure_logging(extra_values=[TOKEN, WEBHOOK_SECRET])
logger = logging.getLogger(__name__)

app = FastAPI()

APPLICATION: Optional[Application] = None


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    keyboard = InlineKeyboardMarkup(
        [[InlineKeyboardButton("❌⭕ New game", callback_data="game_tictactoe")]]
    )
    if update.message:
        await update.message.reply_text(HELP_TEXT, parse_mode="HTML", reply_markup=keyboard)


async def choose_game(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    await query.answer()
    await tic_tac_toe.start_cmd(update, context)
    try:
        await query.delete_message()
    except TelegramError as exc:
        logger.debug("Menu message not deleted: %s", exc)


async def quit_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    message = update.effective_message
    if not message:
        return
    chat = update.effective_chat
    if chat is None:
        return
    tic_tac_toe.reset_for_chat(chat.id, context.bot_data)
    await message.reply_text("Game closed. Use /tictactoe to start a new one.")


def _can_resolve_webhook_host(webhook_url: str) -> bool:
    parsed = urlparse(webhook_url)
    host = parsed.hostname
    if not host:
        logger.error("Webhook URL %s does not contain a hostname", webhook_url)
        return False
    try:
        socket.getaddrinfo(host, None)
    except socket.gaierror as exc:
        logger.warning(
            "Skipping webhook registration for %s: failed to resolve host %s (%s)",
            webhook_url,
            host,
            exc,
        )
        return False
    return True


def _webhook_url() -> str:
    if not PUBLIC_URL:
        raise HTTPException(status_code=400, detail="PUBLIC_URL is not configured")
    webhook_url = f"{PUBLIC_URL.rstrip('/')}{WEBHOOK_PATH}"
    if not _can_resolve_webhook_host(webhook_url):
        raise HTTPException(status_code=503, detail="Webhook host cannot be resolved")
    return webhook_url


def build_application(token: str) -> Application:
    """Build the bot application with every command and callback attached."""

    application = Application.builder().token(token).build()
    application.add_handler(CommandHandler("start", start))
    application.add_handler(CommandHandler("quit", quit_command, block=False))
    application.add_handler(CallbackQueryHandler(choose_game, pattern="^game_tictactoe$"))
    tic_tac_toe.register_handlers(application)
    return application


@app.on_event("startup")
async def on_startup() -> None:
    global APPLICATION
    APPLICATION = build_application(TOKEN)
    await APPLICATION.initialize()
    await APPLICATION.start()
    if PUBLIC_URL:
        webhook_url = f"{PUBLIC_URL.rstrip('/')}{WEBHOOK_PATH}"
        if _can_resolve_webhook_host(webhook_url):
            try:
                info = await APPLICATION.bot.get_webhook_info()
                webhook_is_different = info.url != webhook_url
            except TelegramError as exc:
                logger.warning("Failed to fetch current webhook info: %s", exc)
                webhook_is_different = True
            if webhook_is_different:
                try:
                    await APPLICATION.bot.set_webhook(
                        url=webhook_url,
                        secret_token=WEBHOOK_SECRET,
                        allowed_updates=ALLOWED_UPDATES,
                    )
                except TelegramError as exc:
                    logger.error("Failed to set webhook to %s: %s", webhook_url, exc)
        else:
            logger.warning("Telegram webhook will not be configured without a resolvable host")


@app.on_event("shutdown")
async def on_shutdown() -> None:
    if APPLICATION is None:
        return
    await APPLICATION.stop()
    await APPLICATION.shutdown()


@app.post(WEBHOOK_PATH)
async def telegram_webhook(request: Request) -> JSONResponse:
    if request.headers.get("X-Telegram-Bot-Api-Secret-Token") != WEBHOOK_SECRET:
        raise HTTPException(status_code=403, detail="Invalid secret")
    update = Update.de_json(await request.json(), APPLICATION.bot)
    await APPLICATION.process_update(update)
    return JSONResponse({"ok": True})


@app.get("/set_webhook")
async def set_webhook() -> JSONResponse:
    webhook_url = _webhook_url()
    try:
        await APPLICATION.bot.set_webhook(
            url=webhook_url,
            secret_token=WEBHOOK_SECRET,
            allowed_updates=ALLOWED_UPDATES,
        )
    except TelegramError as exc:
        raise HTTPException(status_code=502, detail=f"Failed to set webhook: {exc}") from exc
    return JSONResponse({"url": webhook_url})


@app.get("/reset_webhook")
async def reset_webhook() -> JSONResponse:
    webhook_url = _webhook_url()
    try:
        await APPLICATION.bot.delete_webhook(drop_pending_updates=False)
        await APPLICATION.bot.set_webhook(
            url=webhook_url,
            secret_token=WEBHOOK_SECRET,
            allowed_updates=ALLOWED_UPDATES,
        )
    except TelegramError as exc:
        raise HTTPException(status_code=502, detail=f"Failed to reset webhook: {exc}") from exc
    return JSONResponse({"reset_to": webhook_url})


@app.get("/")
async def root() -> JSONResponse:
    return JSONResponse({"message": "Tic Tac Toe bot service. See /healthz for status."})


@app.get("/healthz")
async def healthz_get():
    return {"status": "ok"}

@app.head("/healthz", include_in_schema=False)
async def healthz_head():
    # HEAD carries no body
    return Response(status_code=200)
