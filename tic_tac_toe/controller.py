"""Toolkit-independent binding between a view and the game session.

A view hands user input to :class:`ScreenController` and draws whatever
:class:`RenderFrame` comes back through the ``render`` callback. The
controller owns exactly one active :class:`GameSession` and swaps it for a
fresh one on :meth:`ScreenController.restart`.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .state import (
    DEFAULT_PLAYER_NAMES,
    CellValue,
    GameSession,
    InvalidMove,
    create_session,
)
from .state.board import Grid

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    SETUP = "setup"
    PLAYING = "playing"
    FINISHED = "finished"


class OutcomeKind(str, Enum):
    PLAYER_A_WINS = "player_a_wins"
    PLAYER_B_WINS = "player_b_wins"
    DRAW = "draw"


@dataclass(frozen=True, slots=True)
class GameOutcome:
    """End-of-game signal handed to the view."""

    kind: OutcomeKind
    winner_name: Optional[str] = None

    @property
    def is_draw(self) -> bool:
        return self.kind is OutcomeKind.DRAW

    def message(self) -> str:
        if self.is_draw:
            return "It's a draw!"
        return f"{self.winner_name} wins!"


@dataclass(frozen=True, slots=True)
class RenderFrame:
    """Everything a view needs to draw one screen."""

    grid: Grid
    current_player_name: str
    player_names: tuple[str, str]
    phase: Phase
    outcome: Optional[GameOutcome] = None
    error: Optional[str] = None


RenderCallback = Callable[[RenderFrame], None]


class ScreenController:
    """Dispatch view events to the active session and emit render frames."""

    def __init__(
        self,
        render: Optional[RenderCallback] = None,
        *,
        name_a: str = DEFAULT_PLAYER_NAMES[0],
        name_b: str = DEFAULT_PLAYER_NAMES[1],
        rng: Optional[random.Random] = None,
    ) -> None:
        self._render = render
        self._rng = rng
        self._session = create_session(name_a, name_b, rng=rng)
        self._phase = Phase.SETUP
        self._outcome: Optional[GameOutcome] = None

    @property
    def session(self) -> GameSession:
        return self._session

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def outcome(self) -> Optional[GameOutcome]:
        return self._outcome

    # Pre-game controls ---------------------------------------------------
    def rename_players(self, name_a: str, name_b: str) -> RenderFrame:
        if self._phase is not Phase.SETUP:
            return self._emit(error="Names can only be changed before the game starts.")
        self._session.set_player_names(
            _clean_name(name_a, DEFAULT_PLAYER_NAMES[0]),
            _clean_name(name_b, DEFAULT_PLAYER_NAMES[1]),
        )
        return self._emit()

    def randomize_first_player(self) -> RenderFrame:
        if self._phase is not Phase.SETUP:
            return self._emit(
                error="The starting player can only be changed before the game starts."
            )
        self._session.randomize_first_player()
        return self._emit()

    def start(self, name_a: Optional[str] = None, name_b: Optional[str] = None) -> RenderFrame:
        """Leave the setup phase, optionally applying names collected by the view."""

        if self._phase is not Phase.SETUP:
            return self._emit(error="The game has already started.")
        if name_a is not None or name_b is not None:
            first, second = self._session.players
            self._session.set_player_names(
                _clean_name(name_a, first.name), _clean_name(name_b, second.name)
            )
        self._phase = Phase.PLAYING
        return self._emit()

    # Gameplay ----------------------------------------------------------------
    def submit_move(self, row: int, column: int) -> RenderFrame:
        """Attempt a move for the current player and report the new screen."""

        if self._phase is Phase.SETUP:
            return self._emit(error="Start the game first.")
        player = self._session.get_current_player()
        try:
            self._session.make_move(row, column)
        except InvalidMove as exc:
            logger.info("Rejected move by %s at (%s, %s): %s", player.name, row, column, exc)
            return self._emit(error=str(exc))
        if self._session.check_win():
            return self._finish(_winning_outcome(player.token, player.name))
        if self._session.check_draw():
            return self._finish(GameOutcome(OutcomeKind.DRAW))
        self._session.switch_turn()
        return self._emit()

    def restart(self, name_a: Optional[str] = None, name_b: Optional[str] = None) -> RenderFrame:
        """Drop the current session entirely and go back to setup."""

        previous_a, previous_b = (player.name for player in self._session.players)
        self._session = create_session(
            _clean_name(name_a, previous_a), _clean_name(name_b, previous_b), rng=self._rng
        )
        self._phase = Phase.SETUP
        self._outcome = None
        return self._emit()

    def frame(self, error: Optional[str] = None) -> RenderFrame:
        """Build the current frame without notifying the render callback."""

        first, second = self._session.players
        return RenderFrame(
            grid=self._session.get_grid(),
            current_player_name=self._session.get_current_player().name,
            player_names=(first.name, second.name),
            phase=self._phase,
            outcome=self._outcome,
            error=error,
        )

    # Internal helpers --------------------------------------------------------
    def _finish(self, outcome: GameOutcome) -> RenderFrame:
        self._phase = Phase.FINISHED
        self._outcome = outcome
        logger.info("Game finished: %s", outcome.message())
        return self._emit()

    def _emit(self, error: Optional[str] = None) -> RenderFrame:
        frame = self.frame(error)
        if self._render:
            self._render(frame)
        return frame


def _winning_outcome(token: CellValue, name: str) -> GameOutcome:
    kind = OutcomeKind.PLAYER_A_WINS if token is CellValue.PLAYER_A else OutcomeKind.PLAYER_B_WINS
    return GameOutcome(kind, winner_name=name)


def _clean_name(value: Optional[str], fallback: str) -> str:
    if value is None:
        return fallback
    value = value.strip()
    return value or fallback


__all__ = [
    "GameOutcome",
    "OutcomeKind",
    "Phase",
    "RenderCallback",
    "RenderFrame",
    "ScreenController",
]
