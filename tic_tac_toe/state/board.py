"""The square grid of cells that a Tic Tac Toe session plays on."""

from __future__ import annotations

from typing import List, Tuple

from .models import CellValue

BOARD_SIZE = 3

Grid = Tuple[Tuple[CellValue, ...], ...]


class InvalidMove(ValueError):
    """Raised when a move targets an occupied or non-existent cell."""


class Board:
    """A fixed ``size`` x ``size`` grid; (0, 0) is the top left corner."""

    def __init__(self, size: int = BOARD_SIZE) -> None:
        if size < 3:
            raise ValueError(f"Board size must be at least 3, got {size}")
        self._size = size
        self._cells: List[List[CellValue]] = [
            [CellValue.EMPTY for _ in range(size)] for _ in range(size)
        ]

    @property
    def size(self) -> int:
        return self._size

    def get_grid(self) -> Grid:
        """Return an immutable snapshot of every cell value."""

        return tuple(tuple(row) for row in self._cells)

    def get_cell(self, row: int, column: int) -> CellValue:
        self._ensure_in_range(row, column)
        return self._cells[row][column]

    def place_token(self, row: int, column: int, token: CellValue) -> None:
        """Put ``token`` into an empty cell or raise :class:`InvalidMove`."""

        self._ensure_in_range(row, column)
        if token is CellValue.EMPTY:
            raise InvalidMove("Only a player token can be placed.")
        if self._cells[row][column] is not CellValue.EMPTY:
            raise InvalidMove("Select an empty cell!")
        self._cells[row][column] = token

    def empty_cells(self) -> List[Tuple[int, int]]:
        return [
            (row, column)
            for row in range(self._size)
            for column in range(self._size)
            if self._cells[row][column] is CellValue.EMPTY
        ]

    def is_full(self) -> bool:
        return all(cell is not CellValue.EMPTY for row in self._cells for cell in row)

    def format_rows(self) -> str:
        """Render the cell values as plain rows of integers for debug logs."""

        return "\n".join(" ".join(str(int(cell)) for cell in row) for row in self._cells)

    def _ensure_in_range(self, row: int, column: int) -> None:
        # bool is an int subclass; reject it along with other non-integers
        for value in (row, column):
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidMove(f"Cell coordinates must be integers, got {value!r}.")
        if not (0 <= row < self._size and 0 <= column < self._size):
            raise InvalidMove(
                f"Cell ({row}, {column}) is outside the {self._size}x{self._size} board."
            )
