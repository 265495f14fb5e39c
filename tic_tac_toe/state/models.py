"""Dataclasses and enums describing the Tic Tac Toe game state."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum


class CellValue(IntEnum):
    """Closed set of values a single board cell can hold."""

    EMPTY = 0
    PLAYER_A = 1
    PLAYER_B = 2

    @property
    def symbol(self) -> str:
        """Return the printable mark for the cell."""

        return _SYMBOLS[self]


_SYMBOLS = {
    CellValue.EMPTY: "",
    CellValue.PLAYER_A: "X",
    CellValue.PLAYER_B: "O",
}


class GameStatus(str, Enum):
    """States of the session state machine; WON and DRAW are terminal."""

    AWAITING_MOVE = "awaiting_move"
    WON = "won"
    DRAW = "draw"


@dataclass(slots=True, eq=False)
class Player:
    """A named participant bound to one of the two player tokens."""

    name: str
    token: CellValue
