"""Runtime move handling for the Tic Tac Toe board."""

from __future__ import annotations

import logging
from io import BytesIO
from typing import Optional, Tuple

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, InputFile, Update
from telegram.error import TelegramError
from telegram.ext import ContextTypes

from ..controller import Phase, RenderFrame
from ..rendering import TicTacToeRenderer
from ..services import ChatGame, get_registry

logger = logging.getLogger(__name__)

RENDERER = TicTacToeRenderer()
CALLBACK_PREFIX = "ttt"


def cell_callback_data(game_id: str, row: int, column: int) -> str:
    return f"{CALLBACK_PREFIX}:cell:{game_id}:{row}:{column}"


def parse_cell_callback(data: str) -> Optional[Tuple[str, int, int]]:
    """Split ``ttt:cell:<game_id>:<row>:<column>`` into its parts."""

    parts = data.split(":")
    if len(parts) != 5 or parts[0] != CALLBACK_PREFIX or parts[1] != "cell":
        return None
    _, _, game_id, row_raw, column_raw = parts
    try:
        return game_id, int(row_raw), int(column_raw)
    except ValueError:
        return None


def build_board_keyboard(game: ChatGame, frame: RenderFrame) -> InlineKeyboardMarkup:
    """Lay the grid out as inline buttons; a finished board gets a restart row."""

    finished = frame.phase is Phase.FINISHED
    rows = []
    for row_index, row in enumerate(frame.grid):
        buttons = []
        for column_index, cell in enumerate(row):
            callback = (
                f"{CALLBACK_PREFIX}:noop:{game.game_id}"
                if finished
                else cell_callback_data(game.game_id, row_index, column_index)
            )
            buttons.append(InlineKeyboardButton(RENDERER.cell_label(cell), callback_data=callback))
        rows.append(buttons)
    if finished:
        rows.append(
            [InlineKeyboardButton("🔄 Restart", callback_data=f"{CALLBACK_PREFIX}:restart:{game.game_id}")]
        )
    return InlineKeyboardMarkup(rows)


async def show_board(
    game: ChatGame,
    frame: RenderFrame,
    context: ContextTypes.DEFAULT_TYPE,
) -> None:
    """Edit the existing board message or post a new one."""

    bot = context.bot
    if not bot:
        return
    text = RENDERER.render_status(frame)
    keyboard = build_board_keyboard(game, frame)
    if game.board_message_id:
        try:
            await bot.edit_message_text(
                text,
                chat_id=game.chat_id,
                message_id=game.board_message_id,
                parse_mode="HTML",
                reply_markup=keyboard,
            )
            return
        except TelegramError as exc:
            logger.warning("Failed to edit board message %s: %s", game.board_message_id, exc)
            game.board_message_id = None
    sent = await bot.send_message(
        game.chat_id,
        text,
        parse_mode="HTML",
        reply_markup=keyboard,
        message_thread_id=game.thread_id,
    )
    game.board_message_id = sent.message_id


async def announce_result(
    game: ChatGame, frame: RenderFrame, context: ContextTypes.DEFAULT_TYPE
) -> None:
    """Post the final board picture with the winner or draw caption."""

    bot = context.bot
    if not bot or not frame.outcome:
        return
    payload = RENDERER.render_board_image(frame).getvalue()
    try:
        await bot.send_photo(
            game.chat_id,
            photo=InputFile(BytesIO(payload), filename="tic_tac_toe.png"),
            caption=RENDERER.render_status(frame),
            parse_mode="HTML",
            message_thread_id=game.thread_id,
        )
    except TelegramError as exc:
        logger.warning("Failed to send final board for game %s: %s", game.game_id, exc)
        await bot.send_message(
            game.chat_id,
            RENDERER.render_status(frame) + "\n" + RENDERER.render_grid_text(frame),
            parse_mode="HTML",
            message_thread_id=game.thread_id,
        )


async def cell_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle a press on one of the board cells."""

    query = update.callback_query
    if not query:
        return
    parsed = parse_cell_callback(query.data or "")
    if not parsed:
        await query.answer()
        return
    game_id, row, column = parsed
    game = get_registry(context.bot_data).get_by_id(game_id)
    if not game:
        await query.answer("This game is no longer active.", show_alert=True)
        return
    frame = game.controller.submit_move(row, column)
    if frame.error:
        await query.answer(frame.error, show_alert=True)
        return
    await query.answer()
    await show_board(game, frame, context)
    if frame.phase is Phase.FINISHED:
        await announce_result(game, frame, context)


async def noop_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Acknowledge presses on a finished board."""

    query = update.callback_query
    if query:
        await query.answer("The game is over. Press Restart to play again.")


__all__ = [
    "announce_result",
    "build_board_keyboard",
    "cell_callback",
    "cell_callback_data",
    "noop_callback",
    "parse_cell_callback",
    "show_board",
]
