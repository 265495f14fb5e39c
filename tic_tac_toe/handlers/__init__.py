"""Telegram handlers for the Tic Tac Toe game."""

from .gameplay import cell_callback
from .lobby import help_cmd, names_cmd, start_cmd
from .router import register_handlers, reset_for_chat

__all__ = [
    "cell_callback",
    "help_cmd",
    "names_cmd",
    "register_handlers",
    "reset_for_chat",
    "start_cmd",
]
