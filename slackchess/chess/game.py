"""
The Game class is the entrypoint into the domain layer for the service layer.
It is responsible for the business logic of one channel's game: turn order, move validation, draw offers,
resignation and deciding when the game is over. Chess rules themselves come from python-chess.
"""

from dataclasses import dataclass
from typing import Optional, Self

import chess

from slackchess.chess.fen import STARTING_FEN
from slackchess.core.exceptions import (
    GameAlreadyFinishedError,
    GameError,
    IllegalMoveError,
    NoDrawOfferError,
    NotAParticipantError,
    NotYourTurnError,
)
from slackchess.core.models import GameModel
from slackchess.core.shared_types import ENGINE_PLAYER, Color, Status

# Automatic draws reported by the rules engine (no claim needed)
DRAW_TERMINATIONS = {
    chess.Termination.INSUFFICIENT_MATERIAL,
    chess.Termination.SEVENTYFIVE_MOVES,
    chess.Termination.FIVEFOLD_REPETITION,
}


def color_of(turn: chess.Color) -> Color:
    return Color.WHITE if turn == chess.WHITE else Color.BLACK


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    channel_id: str
    board: chess.Board
    players: dict[Color, str]
    status: Status
    winner: Optional[Color] = None
    draw_offer: Optional[Color] = None

    @classmethod
    def from_model(cls, model: GameModel) -> Self:
        """Rebuild the game by replaying the recorded moves (keeps the full history for repetition rules)."""
        board = chess.Board(model.starting_fen)
        for uci in model.moves_uci:
            board.push(chess.Move.from_uci(uci))

        return cls(
            channel_id=model.channel_id,
            board=board,
            players={Color(color): player for color, player in model.players.items()},
            status=Status(model.status),
            winner=Color(model.winner) if model.winner else None,
            draw_offer=Color(model.draw_offer) if model.draw_offer else None,
        )

    def to_model(self) -> GameModel:
        """Encode back into a format the Service layer uses. Record id/version are managed by the Service."""
        starting_board = self.board.root()
        return GameModel(
            channel_id=self.channel_id,
            starting_fen=starting_board.fen(),
            current_fen=self.board.fen(),
            moves_uci=[move.uci() for move in self.board.move_stack],
            players={color.value: player for color, player in self.players.items()},
            status=self.status.value,
            winner=self.winner.value if self.winner else None,
            draw_offer=self.draw_offer.value if self.draw_offer else None,
        )

    @classmethod
    def new_game(
        cls,
        channel_id: str,
        white: str,
        black: str,
        starting_fen: Optional[str] = None,
    ) -> Self:
        return cls(
            channel_id=channel_id,
            board=chess.Board(starting_fen or STARTING_FEN),
            players={Color.WHITE: white, Color.BLACK: black},
            status=Status.IN_PROGRESS,
        )

    # --- queries ---
    @property
    def color_to_move(self) -> Color:
        return color_of(self.board.turn)

    @property
    def player_to_move(self) -> str:
        return self.players[self.color_to_move]

    @property
    def is_engine_turn(self) -> bool:
        return not self.status.is_finished and self.player_to_move == ENGINE_PLAYER

    @property
    def has_engine_opponent(self) -> bool:
        return ENGINE_PLAYER in self.players.values()

    @property
    def last_move(self) -> Optional[chess.Move]:
        return self.board.peek() if self.board.move_stack else None

    def last_move_san(self) -> Optional[str]:
        if not self.board.move_stack:
            return None
        before = self.board.copy()
        move = before.pop()
        return before.san(move)

    def legal_moves_san(self) -> list[str]:
        return [self.board.san(move) for move in self.board.legal_moves]

    def player_color(self, player: str) -> Color:
        """Color played by the user. With both sides played by the same user, that is the side to move."""
        colors = [color for color, name in self.players.items() if name == player]
        if not colors:
            raise NotAParticipantError(
                f"You are not playing in this game. Players: {self._describe_players()}."
            )
        if self.color_to_move in colors:
            return self.color_to_move
        return colors[0]

    # --- commands ---
    def make_move(self, notation: str, player: str) -> chess.Move:
        """
        Attempt a move given in SAN ('Nf3', 'O-O', 'e8=Q') or UCI ('g1f3', 'e7e8q').
        -----
        1. game must be in progress
        2. the player must own the side to move
        3. the move must be legal
        4. push the move, clear any pending draw offer, update the status
        """
        self._assert_in_progress()
        self._assert_your_turn(player)
        move = self._parse_move(notation)
        self._push(move)
        return move

    def apply_engine_move(self, move: chess.Move) -> None:
        """Reply from the move-suggestion engine, checked against the legal moves like any other move."""
        self._assert_in_progress()
        if move not in self.board.legal_moves:
            raise IllegalMoveError(f"Engine suggested an illegal move: {move.uci()}")
        self._push(move)

    def resign(self, player: str) -> None:
        self._assert_in_progress()
        color = self.player_color(player)
        self.winner = color.opponent
        self._change_status(Status.RESIGNED)

    def offer_draw(self, player: str) -> None:
        self._assert_in_progress()
        self.draw_offer = self.player_color(player)

    def accept_draw(self, player: str) -> None:
        self._assert_in_progress()
        self._assert_draw_offered_to(player)
        self.draw_offer = None
        self._change_status(Status.DRAW)

    def decline_draw(self, player: str) -> None:
        self._assert_in_progress()
        self._assert_draw_offered_to(player)
        self.draw_offer = None

    def abort(self) -> None:
        """Superseded by a new game in the same channel."""
        if not self.status.is_finished:
            self._change_status(Status.ABORTED)

    # -- PRIVATE HELPERS ---
    def _assert_in_progress(self) -> None:
        if self.status.is_finished:
            raise GameAlreadyFinishedError(
                f"The game is over ({self.status}). Start a new one with `new`."
            )

    def _assert_your_turn(self, player: str) -> None:
        """You must wait for your turn before making a move."""
        if player not in self.players.values():
            raise NotAParticipantError(
                f"You are not playing in this game. Players: {self._describe_players()}."
            )
        player_to_move = self.player_to_move
        if player != player_to_move:
            raise NotYourTurnError(
                f"It is not your turn. Waiting for {mention(player_to_move)} ({self.color_to_move}) to move first."
            )

    def _assert_draw_offered_to(self, player: str) -> None:
        color = self.player_color(player)
        if self.draw_offer is None or self.draw_offer == color:
            raise NoDrawOfferError("There is no draw offer from your opponent.")

    def _parse_move(self, notation: str) -> chess.Move:
        try:
            move = chess.Move.from_uci(notation)
        except ValueError:
            move = None
        if move is not None and move in self.board.legal_moves:
            return move

        try:
            move = self.board.parse_san(notation)
        except ValueError:
            move = None
        # parse_san also accepts null moves ('--', '0000')
        if move is None or move not in self.board.legal_moves:
            legal = ", ".join(self.legal_moves_san())
            raise IllegalMoveError(
                f"{notation!r} is not a legal move. Legal moves: {legal}"
            )
        return move

    def _push(self, move: chess.Move) -> None:
        self.board.push(move)
        self.draw_offer = None
        self._update_game_status()

    def _update_game_status(self) -> None:
        outcome = self.board.outcome()
        if outcome is None:
            return
        if outcome.termination == chess.Termination.CHECKMATE:
            self.winner = color_of(outcome.winner)
            self._change_status(Status.CHECKMATE)
        elif outcome.termination == chess.Termination.STALEMATE:
            self._change_status(Status.STALEMATE)
        elif outcome.termination in DRAW_TERMINATIONS:
            self._change_status(Status.DRAW)

    def _change_status(self, new_status: Status) -> None:
        if self.status.is_finished:
            raise GameError(f"Cannot change status of a finished game: {self.status}")
        self.status = new_status

    def _describe_players(self) -> str:
        return ", ".join(
            f"{mention(player)} ({color})" for color, player in self.players.items()
        )


def mention(player: str) -> str:
    """Slack mention for a user id. The engine is referred to by name."""
    if player == ENGINE_PLAYER:
        return ENGINE_PLAYER
    return f"<@{player}>"
