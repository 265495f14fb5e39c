"""Service layer for the Tic Tac Toe game."""

from .registry import REGISTRY_KEY, ChatGame, SessionRegistry, get_registry

__all__ = ["REGISTRY_KEY", "ChatGame", "SessionRegistry", "get_registry"]
