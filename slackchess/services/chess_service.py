"""Orchestration of communication from the API layer to business logic and persistence layers (and the reverse direction)."""

import logging
from typing import Optional, assert_never

from slackchess.api.models import SlackResponse, SlashCommand
from slackchess.chess.engine import MoveSuggester
from slackchess.chess.game import Game, mention
from slackchess.commands.parser import (
    Command,
    DrawAction,
    Verb,
    parse_command,
    parse_draw_action,
    parse_move_argument,
    parse_new_game_options,
)
from slackchess.core.exceptions import (
    EngineUnavailableError,
    GameAlreadyFinishedError,
    GameError,
    GameInProgressError,
    NoActiveGameError,
    NotYourTurnError,
    UnknownCommandError,
)
from slackchess.core.models import GameModel
from slackchess.core.shared_types import ENGINE_PLAYER, Color
from slackchess.db.repository import GameRepository
from slackchess.services.formatter import ResponseFormatter
from slackchess.services.locks import ChannelLocks

_log = logging.getLogger(__name__)

ENGINE_PENDING = "The engine has not replied yet. Use `board` to check again."


class ChessService:
    """Orchestration of layers for the chess slash command."""

    def __init__(
        self,
        repository: GameRepository,
        engine: MoveSuggester,
        formatter: ResponseFormatter,
    ) -> None:
        self.repo = repository
        self.engine = engine
        self.formatter = formatter
        self.locks = ChannelLocks()

    # -- API route logic ---
    def handle(self, request: SlashCommand) -> SlackResponse:
        """
        Parse the command text and run it against the channel's game.
        ----
        Game-logic failures are valid outcomes of a command: they come back as a (private) text reply.
        """
        try:
            command = parse_command(request.text)
        except UnknownCommandError as e:
            return self.formatter.help_response(str(e))

        try:
            with self.locks.hold(request.channel_id):
                return self._dispatch(command, request)
        except UnknownCommandError as e:
            return self.formatter.help_response(str(e))
        except GameError as e:
            _log.info(
                "rejected %r in channel=%s from user=%s: %s",
                request.text,
                request.channel_id,
                request.user_id,
                e,
            )
            return self.formatter.error_response(e)

    def _dispatch(self, command: Command, request: SlashCommand) -> SlackResponse:
        match command.verb:
            case Verb.HELP:
                return self.formatter.help_response()
            case Verb.NEW:
                return self.new_game(command, request)
            case Verb.MOVE:
                return self.make_move(command, request)
            case Verb.BOARD:
                return self.show_board(request)
            case Verb.MOVES:
                return self.legal_moves(request)
            case Verb.RESIGN:
                return self.resign(request)
            case Verb.DRAW:
                return self.draw(command, request)
            case _:
                assert_never(command.verb)

    # -- verbs (called with the channel lock held) --
    def new_game(self, command: Command, request: SlashCommand) -> SlackResponse:
        """
        Start a game in the channel. An unfinished game is only replaced with the `force` argument.
        ----
        The new game (with the engine's opening move) is stored before the replaced one is marked aborted.
        """
        options = parse_new_game_options(command.args)

        previous: Optional[Game] = None
        stored_model = self.repo.get_current_game(request.channel_id)
        if stored_model is not None:
            previous = Game.from_model(stored_model)
            if previous.status.is_finished:
                previous = None
            elif not options.force:
                raise GameInProgressError(
                    "A game is already in progress in this channel. Use `new force` to replace it."
                )

        opponent = options.opponent
        if options.color == Color.WHITE:
            game = Game.new_game(request.channel_id, white=request.user_id, black=opponent)
        else:
            game = Game.new_game(request.channel_id, white=opponent, black=request.user_id)

        message = f"New game: {mention(game.players[Color.WHITE])} (white) vs {mention(game.players[Color.BLACK])} (black)."
        if game.is_engine_turn and not self._engine_reply(game):
            message += f" {ENGINE_PENDING}"

        self.repo.create_game(game.to_model())
        if previous is not None:
            assert stored_model is not None
            previous.abort()
            self._persist(previous, stored_model)
        _log.info("new game in channel=%s players=%s", request.channel_id, game.players)
        return self.formatter.game_response(game, message)

    def make_move(self, command: Command, request: SlashCommand) -> SlackResponse:
        notation = parse_move_argument(command.args)
        stored_model = self._fetch_game(request.channel_id)
        game = Game.from_model(stored_model)
        if game.status.is_finished:
            raise GameAlreadyFinishedError(
                f"The game is over ({game.status}). Start a new one with `new`."
            )

        # A reply that timed out earlier is played and stored before the human can move again
        if game.is_engine_turn:
            if not self._engine_reply(game):
                raise NotYourTurnError(ENGINE_PENDING)
            stored_model = self._persist(game, stored_model)

        move = game.make_move(notation, request.user_id)
        message = f"{mention(request.user_id)} played {self._san_of_last(game)}."

        if game.is_engine_turn:
            if self._engine_reply(game):
                message += f" {ENGINE_PLAYER} replied {self._san_of_last(game)}."
            else:
                message += f" {ENGINE_PENDING}"

        self._persist(game, stored_model)
        _log.info("channel=%s move=%s fen=%s", request.channel_id, move.uci(), game.board.fen())
        return self.formatter.game_response(game, message)

    def show_board(self, request: SlashCommand) -> SlackResponse:
        stored_model = self._fetch_game(request.channel_id)
        game = Game.from_model(stored_model)
        message = "Current game."
        if game.is_engine_turn:
            if self._engine_reply(game):
                self._persist(game, stored_model)
                message = f"{ENGINE_PLAYER} played {self._san_of_last(game)}."
            else:
                message = ENGINE_PENDING
        return self.formatter.game_response(game, message)

    def legal_moves(self, request: SlashCommand) -> SlackResponse:
        stored_model, game = self._fetch_active_game(request.channel_id)
        if game.is_engine_turn:
            if not self._engine_reply(game):
                raise NotYourTurnError(ENGINE_PENDING)
            self._persist(game, stored_model)
        if game.status.is_finished:
            message = f"{ENGINE_PLAYER} played {self._san_of_last(game)}."
            return self.formatter.game_response(game, message)
        return self.formatter.moves_response(game)

    def resign(self, request: SlashCommand) -> SlackResponse:
        stored_model, game = self._fetch_active_game(request.channel_id)
        game.resign(request.user_id)
        self._persist(game, stored_model)
        return self.formatter.game_response(game, f"{mention(request.user_id)} resigned.")

    def draw(self, command: Command, request: SlashCommand) -> SlackResponse:
        action = parse_draw_action(command.args)
        stored_model, game = self._fetch_active_game(request.channel_id)
        player = mention(request.user_id)

        match action:
            case DrawAction.OFFER:
                game.offer_draw(request.user_id)
                if game.has_engine_opponent:
                    # The engine never agrees to a draw
                    game.decline_draw(ENGINE_PLAYER)
                    message = f"{player} offered a draw. {ENGINE_PLAYER} declined."
                else:
                    message = f"{player} offered a draw."
            case DrawAction.ACCEPT:
                game.accept_draw(request.user_id)
                message = f"{player} accepted the draw."
            case DrawAction.DECLINE:
                game.decline_draw(request.user_id)
                message = f"{player} declined the draw."
            case _:
                assert_never(action)

        self._persist(game, stored_model)
        return self.formatter.game_response(game, message)

    # -- Internal helpers --
    def _engine_reply(self, game: Game) -> bool:
        """Ask the engine for its move and apply it. False if the engine could not answer (reply stays pending)."""
        try:
            move = self.engine.suggest_move(game.board.copy())
        except EngineUnavailableError as e:
            _log.warning("engine reply pending in channel=%s: %s", game.channel_id, e)
            return False
        game.apply_engine_move(move)
        return True

    def _san_of_last(self, game: Game) -> str:
        san = game.last_move_san()
        assert san is not None
        return san

    def _persist(self, game: Game, stored_model: GameModel) -> GameModel:
        """Write the new state over the record it was read from (compare-and-swap on the version)."""
        model = game.to_model()
        model.game_id = stored_model.game_id
        model.version = stored_model.version
        return self.repo.update_game(model)

    def _fetch_game(self, channel_id: str) -> GameModel:
        """Attempt to find the channel's game in the repository and raise error if there is none."""
        game_model = self.repo.get_current_game(channel_id)
        if game_model is None:
            raise NoActiveGameError("There is no game in this channel. Start one with `new`.")
        return game_model

    def _fetch_active_game(self, channel_id: str) -> tuple[GameModel, Game]:
        stored_model = self._fetch_game(channel_id)
        game = Game.from_model(stored_model)
        if game.status.is_finished:
            raise NoActiveGameError(
                f"There is no game in progress in this channel (last game: {game.status}). Start one with `new`."
            )
        return stored_model, game
