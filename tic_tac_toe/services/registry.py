"""Registry binding Telegram chats to their active Tic Tac Toe controller."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from secrets import token_urlsafe
from typing import Any, Dict, MutableMapping, Optional, Tuple

from ..controller import ScreenController

GameKey = Tuple[int, int]
REGISTRY_KEY = "tic_tac_toe_registry"

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ChatGame:
    """A controller plus the Telegram bookkeeping for one chat/thread."""

    game_id: str
    chat_id: int
    controller: ScreenController
    thread_id: Optional[int] = None
    board_message_id: Optional[int] = None


class SessionRegistry:
    """Store and look up games by chat/thread and by game id."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng
        self._games: Dict[str, ChatGame] = {}
        self._chat_index: Dict[GameKey, str] = {}

    def open_game(self, chat_id: int, thread_id: Optional[int] = None) -> ChatGame:
        """Create a game for the chat, replacing any game already bound to it."""

        key = (chat_id, thread_id or 0)
        stale_id = self._chat_index.get(key)
        if stale_id:
            self._games.pop(stale_id, None)
        game = ChatGame(
            game_id=token_urlsafe(8),
            chat_id=chat_id,
            thread_id=thread_id,
            controller=ScreenController(rng=self._rng),
        )
        self._games[game.game_id] = game
        self._chat_index[key] = game.game_id
        logger.debug("Opened game %s for chat %s", game.game_id, key)
        return game

    def restart_game(self, game: ChatGame) -> ChatGame:
        """Swap in a new session and a new id so old keyboards stop working."""

        self._games.pop(game.game_id, None)
        game.controller.restart()
        game.game_id = token_urlsafe(8)
        game.board_message_id = None
        self._games[game.game_id] = game
        self._chat_index[(game.chat_id, game.thread_id or 0)] = game.game_id
        return game

    def get_by_chat(self, chat_id: int, thread_id: Optional[int]) -> Optional[ChatGame]:
        game_id = self._chat_index.get((chat_id, thread_id or 0))
        return self._games.get(game_id) if game_id else None

    def get_by_id(self, game_id: str) -> Optional[ChatGame]:
        return self._games.get(game_id)

    def drop_chat(self, chat_id: int) -> None:
        """Forget every game bound to the chat, across all threads."""

        keys = [key for key in self._chat_index if key[0] == chat_id]
        for key in keys:
            game_id = self._chat_index.pop(key)
            self._games.pop(game_id, None)

    def reset(self) -> None:
        self._games.clear()
        self._chat_index.clear()


def get_registry(bot_data: MutableMapping[str, Any]) -> SessionRegistry:
    """Return the registry kept in the application's ``bot_data``."""

    registry = bot_data.get(REGISTRY_KEY)
    if not isinstance(registry, SessionRegistry):
        registry = SessionRegistry()
        bot_data[REGISTRY_KEY] = registry
    return registry
