"""State primitives for the Tic Tac Toe game."""

from .board import BOARD_SIZE, Board, InvalidMove
from .models import CellValue, GameStatus, Player
from .session import DEFAULT_PLAYER_NAMES, WIN_LENGTH, GameSession, create_session

__all__ = [
    "BOARD_SIZE",
    "Board",
    "CellValue",
    "DEFAULT_PLAYER_NAMES",
    "GameSession",
    "GameStatus",
    "InvalidMove",
    "Player",
    "WIN_LENGTH",
    "create_session",
]
