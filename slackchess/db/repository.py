"""Protocol repository: where the games of each channel are kept (SQLAlchemy, in-memory, ...)"""

from typing import Protocol

from slackchess.core.models import GameModel


class GameRepository(Protocol):
    """Persistence layer orchestration. Records are never deleted: the latest game of a channel is its current game."""

    def get_current_game(self, channel_id: str) -> GameModel | None:
        """Most recently created game for the channel, if any."""
        ...

    def create_game(self, game: GameModel) -> GameModel:
        """Store a new game for game.channel_id. Returns the stored data with its new game_id and version."""
        ...

    def update_game(self, game: GameModel) -> GameModel:
        """
        Compare-and-swap: overwrite the record game.game_id only if its stored version still equals game.version.
        Returns the stored data with the incremented version, raises ConcurrentUpdateError otherwise.
        """
        ...
