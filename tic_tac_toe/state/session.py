"""Turn handling and win/draw detection for a single Tic Tac Toe game."""

from __future__ import annotations

import logging
import random
from typing import Optional, Tuple

from .board import BOARD_SIZE, Board, Grid, InvalidMove
from .models import CellValue, GameStatus, Player

logger = logging.getLogger(__name__)

WIN_LENGTH = 3
DEFAULT_PLAYER_NAMES = ("Player 1", "Player 2")

# (row step, column step): horizontal, vertical, diagonal, anti-diagonal
DIRECTIONS: Tuple[Tuple[int, int], ...] = ((0, 1), (1, 0), (1, 1), (-1, 1))


class GameSession:
    """Own a board, two players and the pointer to whose turn it is.

    ``make_move`` and ``switch_turn`` are separate calls: the
    caller checks ``check_win``/``check_draw`` for the player who just moved
    and only then hands the turn over.
    """

    def __init__(
        self,
        name_a: str = DEFAULT_PLAYER_NAMES[0],
        name_b: str = DEFAULT_PLAYER_NAMES[1],
        *,
        board: Optional[Board] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._board = board or Board(BOARD_SIZE)
        self._players = (
            Player(name=name_a, token=CellValue.PLAYER_A),
            Player(name=name_b, token=CellValue.PLAYER_B),
        )
        self._current = self._players[0]
        self._rng = rng or random.Random()
        self._status = GameStatus.AWAITING_MOVE
        self._winner: Optional[Player] = None
        self._move_count = 0
        self._log_new_round()

    # Read access ------------------------------------------------------
    @property
    def board(self) -> Board:
        return self._board

    @property
    def players(self) -> Tuple[Player, Player]:
        return self._players

    @property
    def status(self) -> GameStatus:
        return self._status

    @property
    def winner(self) -> Optional[Player]:
        """The player who completed a line, once the game is won."""

        return self._winner

    @property
    def is_over(self) -> bool:
        return self._status is not GameStatus.AWAITING_MOVE

    @property
    def move_count(self) -> int:
        return self._move_count

    def get_grid(self) -> Grid:
        return self._board.get_grid()

    def get_current_player(self) -> Player:
        return self._current

    # Player management -------------------------------------------------
    def set_player_names(self, name_a: str, name_b: str) -> None:
        """Rename both players without touching tokens or the turn."""

        self._players[0].name = name_a
        self._players[1].name = name_b

    def randomize_first_player(self) -> Player:
        """Flip a coin to pick who moves first and return that player."""

        self._current = self._rng.choice(self._players)
        logger.debug("Coin flip: %s starts", self._current.name)
        return self._current

    def switch_turn(self) -> Player:
        self._current = (
            self._players[1] if self._current is self._players[0] else self._players[0]
        )
        self._log_new_round()
        return self._current

    # Moves ---------------------------------------------------------------
    def make_move(self, row: int, column: int) -> None:
        """Place the current player's token; :class:`InvalidMove` on failure.

        The turn is never advanced here, successful or not.
        """

        if self.is_over:
            raise InvalidMove("The game is already over.")
        player = self._current
        self._board.place_token(row, column, player.token)
        self._move_count += 1
        if self._has_line(player.token):
            self._status = GameStatus.WON
            self._winner = player
            logger.debug("%s completed a line at move %d", player.name, self._move_count)
        elif self._board.is_full():
            self._status = GameStatus.DRAW
            logger.debug("Board is full after %d moves, draw", self._move_count)

    def check_win(self) -> bool:
        """Return True if the current player owns any run of WIN_LENGTH cells."""

        return self._has_line(self._current.token)

    def check_draw(self) -> bool:
        """Return True when no empty cell is left.

        Only meaningful once ``check_win`` has come back False.
        """

        return self._board.is_full()

    # Internal helpers ------------------------------------------------------
    def _has_line(self, token: CellValue) -> bool:
        grid = self._board.get_grid()
        size = self._board.size
        for row in range(size):
            for column in range(size):
                if grid[row][column] is not token:
                    continue
                for row_step, column_step in DIRECTIONS:
                    end_row = row + row_step * (WIN_LENGTH - 1)
                    end_column = column + column_step * (WIN_LENGTH - 1)
                    if not (0 <= end_row < size and 0 <= end_column < size):
                        continue
                    if all(
                        grid[row + row_step * offset][column + column_step * offset] is token
                        for offset in range(1, WIN_LENGTH)
                    ):
                        return True
        return False

    def _log_new_round(self) -> None:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%s\n%s's turn", self._board.format_rows(), self._current.name)


def create_session(
    name_a: str = DEFAULT_PLAYER_NAMES[0],
    name_b: str = DEFAULT_PLAYER_NAMES[1],
    *,
    rng: Optional[random.Random] = None,
) -> GameSession:
    """Start a fresh game on an empty 3x3 board with player A to move."""

    return GameSession(name_a, name_b, rng=rng)


__all__ = [
    "DEFAULT_PLAYER_NAMES",
    "DIRECTIONS",
    "GameSession",
    "WIN_LENGTH",
    "create_session",
]
