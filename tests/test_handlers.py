"""Tests for the Telegram lobby and gameplay handlers."""

from __future__ import annotations

import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from telegram.error import BadRequest
from telegram.ext import Application, CallbackQueryHandler, CommandHandler

sys.path.append(str(Path(__file__).resolve().parents[1]))

from tic_tac_toe.controller import Phase
from tic_tac_toe.handlers import gameplay, lobby
from tic_tac_toe.handlers.router import register_handlers, reset_for_chat
from tic_tac_toe.services import ChatGame, get_registry


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO tests to run on asyncio only (Telegram handlers use asyncio)."""

    return "asyncio"


def _build_bot() -> SimpleNamespace:
    return SimpleNamespace(
        send_message=AsyncMock(return_value=SimpleNamespace(message_id=42)),
        edit_message_text=AsyncMock(),
        send_photo=AsyncMock(),
    )


def _build_context(*, args: list[str] | None = None) -> SimpleNamespace:
    return SimpleNamespace(bot=_build_bot(), bot_data={}, args=args or [])


def _build_command_update(chat_id: int = 100) -> SimpleNamespace:
    message = SimpleNamespace(reply_text=AsyncMock(), message_thread_id=None)
    return SimpleNamespace(
        effective_message=message,
        effective_chat=SimpleNamespace(id=chat_id),
        callback_query=None,
    )


def _build_query_update(data: str, message_id: int = 7) -> SimpleNamespace:
    query = SimpleNamespace(
        data=data,
        message=SimpleNamespace(message_id=message_id),
        answer=AsyncMock(),
        edit_message_text=AsyncMock(),
        edit_message_reply_markup=AsyncMock(),
    )
    return SimpleNamespace(callback_query=query)


def _started_game(context: SimpleNamespace, chat_id: int = 100) -> ChatGame:
    game = get_registry(context.bot_data).open_game(chat_id)
    game.controller.rename_players("Alice", "Bob")
    game.controller.start()
    game.board_message_id = 7
    return game


async def _press(game: ChatGame, context: SimpleNamespace, row: int, column: int) -> SimpleNamespace:
    update = _build_query_update(gameplay.cell_callback_data(game.game_id, row, column))
    await gameplay.cell_callback(update, context)
    return update.callback_query


def test_parse_cell_callback() -> None:
    assert gameplay.parse_cell_callback("ttt:cell:abc-_1:2:0") == ("abc-_1", 2, 0)
    assert gameplay.parse_cell_callback("ttt:cell:abc:x:0") is None
    assert gameplay.parse_cell_callback("ttt:coin:abc") is None
    assert gameplay.parse_cell_callback("") is None


@pytest.mark.anyio
async def test_start_cmd_opens_game_with_setup_keyboard() -> None:
    context = _build_context()
    update = _build_command_update(chat_id=100)

    await lobby.start_cmd(update, context)

    game = get_registry(context.bot_data).get_by_chat(100, None)
    assert game is not None
    assert game.controller.phase is Phase.SETUP
    context.bot.send_message.assert_awaited_once()
    markup = context.bot.send_message.await_args.kwargs["reply_markup"]
    callbacks = [button.callback_data for row in markup.inline_keyboard for button in row]
    assert callbacks == [f"ttt:coin:{game.game_id}", f"ttt:start:{game.game_id}"]


@pytest.mark.anyio
async def test_start_cmd_replaces_previous_game() -> None:
    context = _build_context()

    await lobby.start_cmd(_build_command_update(), context)
    first = get_registry(context.bot_data).get_by_chat(100, None)
    await lobby.start_cmd(_build_command_update(), context)
    second = get_registry(context.bot_data).get_by_chat(100, None)

    assert first is not second
    assert get_registry(context.bot_data).get_by_id(first.game_id) is None


@pytest.mark.anyio
async def test_names_cmd_renames_players() -> None:
    context = _build_context(args=["Alice", "Bob"])
    update = _build_command_update()
    game = get_registry(context.bot_data).open_game(100)

    await lobby.names_cmd(update, context)

    assert [player.name for player in game.controller.session.players] == ["Alice", "Bob"]
    assert "Alice" in update.effective_message.reply_text.await_args.args[0]


@pytest.mark.anyio
async def test_names_cmd_requires_two_names_and_a_game() -> None:
    context = _build_context(args=["Alice"])
    update = _build_command_update()

    await lobby.names_cmd(update, context)
    assert "/tictactoe" in update.effective_message.reply_text.await_args.args[0]

    get_registry(context.bot_data).open_game(100)
    await lobby.names_cmd(update, context)
    assert "Usage" in update.effective_message.reply_text.await_args.args[0]


@pytest.mark.anyio
async def test_coin_callback_reports_first_player() -> None:
    context = _build_context()
    game = get_registry(context.bot_data).open_game(100)
    update = _build_query_update(f"ttt:coin:{game.game_id}")
    update.callback_query.edit_message_text.side_effect = BadRequest("Message is not modified")

    await lobby.coin_callback(update, context)

    current = game.controller.session.get_current_player().name
    update.callback_query.answer.assert_awaited_once_with(f"{current} moves first.")


@pytest.mark.anyio
async def test_start_button_turns_setup_message_into_board() -> None:
    context = _build_context()
    game = get_registry(context.bot_data).open_game(100)
    update = _build_query_update(f"ttt:start:{game.game_id}", message_id=55)

    await lobby.start_button_callback(update, context)

    assert game.controller.phase is Phase.PLAYING
    assert game.board_message_id == 55
    kwargs = context.bot.edit_message_text.await_args.kwargs
    assert kwargs["message_id"] == 55
    assert len(kwargs["reply_markup"].inline_keyboard) == 3


@pytest.mark.anyio
async def test_cell_callback_places_token_and_redraws() -> None:
    context = _build_context()
    game = _started_game(context)

    query = await _press(game, context, 1, 1)

    query.answer.assert_awaited_once_with()
    markup = context.bot.edit_message_text.await_args.kwargs["reply_markup"]
    assert markup.inline_keyboard[1][1].text == "X"
    assert "Bob" in context.bot.edit_message_text.await_args.args[0]


@pytest.mark.anyio
async def test_cell_callback_alerts_on_occupied_cell() -> None:
    context = _build_context()
    game = _started_game(context)
    await _press(game, context, 0, 0)
    context.bot.edit_message_text.reset_mock()

    query = await _press(game, context, 0, 0)

    query.answer.assert_awaited_once_with("Select an empty cell!", show_alert=True)
    context.bot.edit_message_text.assert_not_awaited()
    assert game.controller.session.get_current_player().name == "Bob"


@pytest.mark.anyio
async def test_cell_callback_rejects_unknown_game() -> None:
    context = _build_context()
    update = _build_query_update("ttt:cell:missing:0:0")

    await gameplay.cell_callback(update, context)

    update.callback_query.answer.assert_awaited_once_with(
        "This game is no longer active.", show_alert=True
    )


@pytest.mark.anyio
async def test_show_board_falls_back_to_new_message() -> None:
    context = _build_context()
    game = _started_game(context)
    context.bot.edit_message_text.side_effect = BadRequest("Message to edit not found")

    await gameplay.show_board(game, game.controller.frame(), context)

    context.bot.send_message.assert_awaited_once()
    assert game.board_message_id == 42


@pytest.mark.anyio
async def test_winning_move_freezes_board_and_posts_result() -> None:
    context = _build_context()
    game = _started_game(context)

    for row, column in [(0, 0), (1, 0), (0, 1), (1, 1), (0, 2)]:
        await _press(game, context, row, column)

    assert game.controller.phase is Phase.FINISHED
    markup = context.bot.edit_message_text.await_args.kwargs["reply_markup"]
    assert all(
        button.callback_data == f"ttt:noop:{game.game_id}" for row in markup.inline_keyboard[:3] for button in row
    )
    assert markup.inline_keyboard[3][0].callback_data == f"ttt:restart:{game.game_id}"
    context.bot.send_photo.assert_awaited_once()
    assert "Alice" in context.bot.send_photo.await_args.kwargs["caption"]


@pytest.mark.anyio
async def test_restart_callback_starts_fresh_setup() -> None:
    context = _build_context()
    game = _started_game(context)
    for row, column in [(0, 0), (1, 0), (0, 1), (1, 1), (0, 2)]:
        await _press(game, context, row, column)
    old_id = game.game_id
    context.bot.send_message.reset_mock()

    await lobby.restart_callback(_build_query_update(f"ttt:restart:{old_id}"), context)

    registry = get_registry(context.bot_data)
    assert registry.get_by_id(old_id) is None
    assert registry.get_by_chat(100, None) is game
    assert game.game_id != old_id
    assert game.controller.phase is Phase.SETUP
    assert game.board_message_id is None
    context.bot.send_message.assert_awaited_once()
    stale = await _press(SimpleNamespace(game_id=old_id), context, 2, 2)
    stale.answer.assert_awaited_once_with("This game is no longer active.", show_alert=True)


@pytest.mark.anyio
async def test_restart_callback_ignores_running_game() -> None:
    context = _build_context()
    game = _started_game(context)
    update = _build_query_update(f"ttt:restart:{game.game_id}")

    await lobby.restart_callback(update, context)

    update.callback_query.answer.assert_awaited_once_with("The game is still running.", show_alert=True)
    assert game.controller.phase is Phase.PLAYING


def test_reset_for_chat_drops_games() -> None:
    bot_data: dict = {}
    game = get_registry(bot_data).open_game(100)

    reset_for_chat(100, bot_data)

    assert get_registry(bot_data).get_by_id(game.game_id) is None


def test_register_handlers_attaches_commands_and_callbacks() -> None:
    application = Application.builder().token("123:ABC").build()

    register_handlers(application)

    handlers = application.handlers[0]
    patterns = {
        handler.pattern.pattern for handler in handlers if isinstance(handler, CallbackQueryHandler)
    }
    commands = set().union(
        *(handler.commands for handler in handlers if isinstance(handler, CommandHandler))
    )
    assert {"tictactoe", "newgame", "names", "help"} <= commands
    assert "^ttt:cell:" in patterns
    assert "^ttt:restart:" in patterns
