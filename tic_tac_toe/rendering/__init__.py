"""Rendering facade for the Tic Tac Toe game."""

from .board import TicTacToeRenderer, TicTacToeRenderTheme

__all__ = ["TicTacToeRenderer", "TicTacToeRenderTheme"]
