"""Implementation of (Game)Repository keeping everything in process memory."""

import threading
from copy import deepcopy
from dataclasses import replace
from uuid import UUID, uuid4

from slackchess.core.exceptions import ConcurrentUpdateError, RepositoryError
from slackchess.core.models import GameModel


class InMemoryGameRepository:
    """Games stored in dictionaries. Stored models are copied on the way in and out."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._games: dict[UUID, GameModel] = {}
        self._current: dict[str, UUID] = {}

    def get_current_game(self, channel_id: str) -> GameModel | None:
        with self._lock:
            game_id = self._current.get(channel_id)
            if game_id is None:
                return None
            return deepcopy(self._games[game_id])

    def create_game(self, game: GameModel) -> GameModel:
        with self._lock:
            stored = replace(deepcopy(game), game_id=uuid4(), version=1)
            self._games[stored.game_id] = stored
            self._current[stored.channel_id] = stored.game_id
            return deepcopy(stored)

    def update_game(self, game: GameModel) -> GameModel:
        with self._lock:
            if game.game_id is None or game.game_id not in self._games:
                raise RepositoryError(f"Game with game_id={game.game_id} not found.")
            existing = self._games[game.game_id]
            if existing.version != game.version:
                raise ConcurrentUpdateError(
                    f"Game {game.game_id} changed: stored version {existing.version}, expected {game.version}."
                )
            stored = replace(deepcopy(game), version=game.version + 1)
            self._games[game.game_id] = stored
            return deepcopy(stored)

    def all_games(self, channel_id: str) -> list[GameModel]:
        """Every game ever played in the channel, oldest first."""
        with self._lock:
            return [
                deepcopy(game)
                for game in self._games.values()
                if game.channel_id == channel_id
            ]
