"""Two-player Tic Tac Toe: game core, view controller and Telegram binding."""

from .controller import GameOutcome, OutcomeKind, Phase, RenderFrame, ScreenController
from .handlers import register_handlers, reset_for_chat, start_cmd
from .state import (
    Board,
    CellValue,
    GameSession,
    GameStatus,
    InvalidMove,
    Player,
    create_session,
)

__all__ = [
    "Board",
    "CellValue",
    "GameOutcome",
    "GameSession",
    "GameStatus",
    "InvalidMove",
    "OutcomeKind",
    "Phase",
    "Player",
    "RenderFrame",
    "ScreenController",
    "create_session",
    "register_handlers",
    "reset_for_chat",
    "start_cmd",
]
