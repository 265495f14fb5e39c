"""Registration helpers for Tic Tac Toe handlers."""

from __future__ import annotations

from typing import Optional

from telegram.ext import Application, CallbackQueryHandler, CommandHandler

from ..services import get_registry
from .gameplay import cell_callback, noop_callback
from .lobby import (
    coin_callback,
    help_cmd,
    names_cmd,
    restart_callback,
    start_button_callback,
    start_cmd,
)


def reset_for_chat(chat_id: int, bot_data: dict) -> None:
    """Drop every game bound to the provided chat."""

    get_registry(bot_data).drop_chat(chat_id)


def register_handlers(application: Optional[Application]) -> None:
    """Attach Tic Tac Toe command and callback handlers to the application."""

    if not application:
        return

    application.add_handler(CommandHandler(["tictactoe", "newgame"], start_cmd))
    application.add_handler(CommandHandler("names", names_cmd))
    application.add_handler(CommandHandler("help", help_cmd, block=False))
    application.add_handler(CallbackQueryHandler(cell_callback, pattern="^ttt:cell:"))
    application.add_handler(CallbackQueryHandler(coin_callback, pattern="^ttt:coin:"))
    application.add_handler(CallbackQueryHandler(start_button_callback, pattern="^ttt:start:"))
    application.add_handler(CallbackQueryHandler(restart_callback, pattern="^ttt:restart:"))
    application.add_handler(CallbackQueryHandler(noop_callback, pattern="^ttt:noop:"))
