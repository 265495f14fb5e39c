"""Setup handlers: opening a game, naming players, coin flip, start and restart."""

from __future__ import annotations

import logging
from typing import Optional

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.error import TelegramError
from telegram.ext import ContextTypes

from ..controller import Phase, RenderFrame
from ..services import ChatGame, get_registry
from .gameplay import CALLBACK_PREFIX, RENDERER, show_board

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "<b>Tic Tac Toe</b>\n"
    "1. /tictactoe opens a new board in this chat.\n"
    "2. /names &lt;first&gt; &lt;second&gt; renames both players before the start.\n"
    "3. \"Randomize\" flips a coin for the first move, \"Start\" shows the board.\n"
    "4. Players take turns pressing empty cells. Three in a row wins."
)


def _setup_keyboard(game: ChatGame) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [
            [
                InlineKeyboardButton(
                    "🎲 Randomize starting player",
                    callback_data=f"{CALLBACK_PREFIX}:coin:{game.game_id}",
                )
            ],
            [
                InlineKeyboardButton(
                    "▶️ Start game", callback_data=f"{CALLBACK_PREFIX}:start:{game.game_id}"
                )
            ],
        ]
    )


def _setup_text(frame: RenderFrame) -> str:
    return f"<b>Tic Tac Toe</b>\n{RENDERER.render_status(frame)}"


def _game_id_from(data: str, action: str) -> str:
    _, _, game_id = data.partition(f"{CALLBACK_PREFIX}:{action}:")
    return game_id


async def _publish_setup(game: ChatGame, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not context.bot:
        return
    await context.bot.send_message(
        game.chat_id,
        _setup_text(game.controller.frame()),
        parse_mode="HTML",
        reply_markup=_setup_keyboard(game),
        message_thread_id=game.thread_id,
    )


async def start_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Open a fresh game in the current chat and show the setup controls."""

    message = update.effective_message
    chat = update.effective_chat
    if not message or not chat:
        return
    game = get_registry(context.bot_data).open_game(chat.id, message.message_thread_id)
    await _publish_setup(game, context)


async def help_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    message = update.effective_message
    if message:
        await message.reply_text(HELP_TEXT, parse_mode="HTML")


async def names_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Rename both players: ``/names Alice Bob``."""

    message = update.effective_message
    chat = update.effective_chat
    if not message or not chat:
        return
    game = get_registry(context.bot_data).get_by_chat(chat.id, message.message_thread_id)
    if not game:
        await message.reply_text("No game here yet. Use /tictactoe to open one.")
        return
    args = list(context.args or [])
    if len(args) != 2:
        await message.reply_text("Usage: /names <first player> <second player>")
        return
    frame = game.controller.rename_players(args[0], args[1])
    if frame.error:
        await message.reply_text(frame.error)
        return
    await message.reply_text(_setup_text(frame), parse_mode="HTML")


async def coin_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Pick the starting player at random."""

    query = update.callback_query
    if not query:
        return
    game = get_registry(context.bot_data).get_by_id(_game_id_from(query.data or "", "coin"))
    if not game:
        await query.answer("This game is no longer active.", show_alert=True)
        return
    frame = game.controller.randomize_first_player()
    if frame.error:
        await query.answer(frame.error, show_alert=True)
        return
    await query.answer(f"{frame.current_player_name} moves first.")
    try:
        await query.edit_message_text(
            _setup_text(frame), parse_mode="HTML", reply_markup=_setup_keyboard(game)
        )
    except TelegramError as exc:
        # editing to identical text fails when the coin lands on the same player
        logger.debug("Setup message not updated: %s", exc)


async def start_button_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Leave setup and turn the setup message into the board."""

    query = update.callback_query
    if not query:
        return
    game = get_registry(context.bot_data).get_by_id(_game_id_from(query.data or "", "start"))
    if not game:
        await query.answer("This game is no longer active.", show_alert=True)
        return
    frame = game.controller.start()
    if frame.error:
        await query.answer(frame.error, show_alert=True)
        return
    await query.answer()
    message_id = _message_id(query)
    if message_id is not None:
        game.board_message_id = message_id
    await show_board(game, frame, context)


async def restart_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Discard the finished session and offer a fresh setup."""

    query = update.callback_query
    if not query:
        return
    registry = get_registry(context.bot_data)
    game = registry.get_by_id(_game_id_from(query.data or "", "restart"))
    if not game:
        await query.answer("This game is no longer active.", show_alert=True)
        return
    if game.controller.phase is not Phase.FINISHED:
        await query.answer("The game is still running.", show_alert=True)
        return
    await query.answer()
    try:
        await query.edit_message_reply_markup(reply_markup=None)
    except TelegramError as exc:
        logger.warning("Failed to clear finished board for game %s: %s", game.game_id, exc)
    registry.restart_game(game)
    await _publish_setup(game, context)


def _message_id(query) -> Optional[int]:
    message = getattr(query, "message", None)
    return getattr(message, "message_id", None)


__all__ = [
    "HELP_TEXT",
    "coin_callback",
    "help_cmd",
    "names_cmd",
    "restart_callback",
    "start_button_callback",
    "start_cmd",
]
