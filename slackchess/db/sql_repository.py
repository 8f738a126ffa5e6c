"""Implementation of (Game)Repository using SQLAlchemy"""

from uuid import UUID, uuid4

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from slackchess.core.exceptions import ConcurrentUpdateError, RepositoryError
from slackchess.core.models import GameModel
from slackchess.db.schema import DBGame


class SQLGameRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy. One session per operation (called from many threads)."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    def get_current_game(self, channel_id: str) -> GameModel | None:
        """Most recently created game for the channel, if any."""
        with self.session_factory() as db:
            query = (
                select(DBGame)
                .where(DBGame.channel_id == channel_id)
                .order_by(DBGame.sequence.desc())
                .limit(1)
            )
            game_db = db.scalar(query)
            if game_db:
                return self._to_model(game_db)
            return None

    def create_game(self, game: GameModel) -> GameModel:
        """Store new game and return the stored data (with newly created game ID)."""
        with self.session_factory() as db:
            game_db = DBGame(
                id=uuid4(),
                channel_id=game.channel_id,
                starting_fen=game.starting_fen,
                current_fen=game.current_fen,
                moves_uci=game.moves_uci,
                players=game.players,
                status=game.status,
                winner=game.winner,
                draw_offer=game.draw_offer,
                version=1,
                sequence=self._next_sequence(db),
            )
            db.add(game_db)
            try:
                db.commit()
            except IntegrityError as e:
                db.rollback()
                raise ConcurrentUpdateError(
                    f"Another game was created at the same time in channel={game.channel_id}."
                ) from e
            db.refresh(game_db)
            return self._to_model(game_db)

    def update_game(self, game: GameModel) -> GameModel:
        """Overwrite the record only if nobody else wrote it since it was read (version check in the WHERE clause)."""
        if game.game_id is None:
            raise RepositoryError("Cannot update a game that was never stored.")

        with self.session_factory() as db:
            statement = (
                update(DBGame)
                .where(DBGame.id == game.game_id, DBGame.version == game.version)
                .values(
                    current_fen=game.current_fen,
                    moves_uci=game.moves_uci,
                    players=game.players,
                    status=game.status,
                    winner=game.winner,
                    draw_offer=game.draw_offer,
                    version=game.version + 1,
                )
            )
            result = db.execute(statement)
            if result.rowcount != 1:
                db.rollback()
                if self._fetch_game(db, game.game_id) is None:
                    raise RepositoryError(f"Game with game_id={game.game_id} not found.")
                raise ConcurrentUpdateError(
                    f"Game {game.game_id} was changed by another request (expected version {game.version})."
                )
            db.commit()
            game_db = self._fetch_game(db, game.game_id)
            assert game_db is not None
            return self._to_model(game_db)

    def _next_sequence(self, db: Session) -> int:
        """Read-then-insert: a concurrent insert with the same value is rejected by the unique constraint."""
        return db.scalar(select(func.coalesce(func.max(DBGame.sequence), 0))) + 1

    def _fetch_game(self, db: Session, game_id: UUID) -> DBGame | None:
        query = select(DBGame).where(DBGame.id == game_id)
        return db.scalar(query)

    def _to_model(self, game_db: DBGame) -> GameModel:
        """Convert SQLAlchemy model to data transfer model."""
        return GameModel(
            channel_id=game_db.channel_id,
            starting_fen=game_db.starting_fen,
            current_fen=game_db.current_fen,
            moves_uci=list(game_db.moves_uci),
            players=dict(game_db.players),
            status=game_db.status,
            winner=game_db.winner,
            draw_offer=game_db.draw_offer,
            game_id=game_db.id,
            version=game_db.version,
        )
