"""Build the Slack reply for a command: a text summary plus a link to the rendered board."""

from typing import Iterable, Optional, assert_never
from urllib.parse import quote

import chess

from slackchess.api.models import Attachment, SlackResponse
from slackchess.chess.fen import placement
from slackchess.chess.game import Game, mention
from slackchess.chess.square import format_squares
from slackchess.commands.parser import HELP_TEXT
from slackchess.core.exceptions import GameError
from slackchess.core.shared_types import Color, Status


class ResponseFormatter:
    def __init__(self, base_url: str) -> None:
        self.base_url = base_url.rstrip("/")

    def board_image_url(
        self, board: chess.Board, highlights: Iterable[chess.Square] = ()
    ) -> str:
        """Only the piece placement is embedded, the image endpoint fills in the remaining FEN fields."""
        url = f"{self.base_url}/board/{quote(placement(board), safe='/')}.png"
        marks = format_squares(list(highlights))
        if marks:
            url += f"?markSquares={marks}"
        return url

    def game_response(self, game: Game, message: str) -> SlackResponse:
        last_move = game.last_move
        highlights = [last_move.from_square, last_move.to_square] if last_move else []
        return SlackResponse(
            response_type="in_channel",
            text=message,
            attachments=[
                Attachment(
                    text=self.summary(game),
                    image_url=self.board_image_url(game.board, highlights),
                )
            ],
        )

    def summary(self, game: Game) -> str:
        lines = [
            f"White: {mention(game.players[Color.WHITE])}  Black: {mention(game.players[Color.BLACK])}"
        ]
        last_move_san = game.last_move_san()
        if last_move_san:
            lines.append(f"Last move: {last_move_san}")
        lines.append(self._status_line(game))
        return "\n".join(lines)

    def moves_response(self, game: Game) -> SlackResponse:
        moves = ", ".join(game.legal_moves_san())
        return SlackResponse(
            response_type="ephemeral",
            text=f"Legal moves for {game.color_to_move}: {moves}",
        )

    def error_response(self, error: GameError) -> SlackResponse:
        return SlackResponse(response_type="ephemeral", text=str(error))

    def help_response(self, reason: Optional[str] = None) -> SlackResponse:
        text = f"{reason}\n\n{HELP_TEXT}" if reason else HELP_TEXT
        return SlackResponse(response_type="ephemeral", text=text)

    def _status_line(self, game: Game) -> str:
        match game.status:
            case Status.IN_PROGRESS:
                line = f"{mention(game.player_to_move)} ({game.color_to_move}) to move."
                if game.board.is_check():
                    line = f"Check! {line}"
                if game.draw_offer:
                    line += f" {game.draw_offer.capitalize()} offers a draw."
                return line
            case Status.CHECKMATE:
                return f"Checkmate. {self._winner(game)} wins."
            case Status.RESIGNED:
                return f"{self._loser(game)} resigned. {self._winner(game)} wins."
            case Status.STALEMATE:
                return "Stalemate. The game is drawn."
            case Status.DRAW:
                return "The game is drawn."
            case Status.ABORTED:
                return "The game was aborted."
            case _:
                assert_never(game.status)

    def _winner(self, game: Game) -> str:
        assert game.winner is not None
        return f"{mention(game.players[game.winner])} ({game.winner})"

    def _loser(self, game: Game) -> str:
        assert game.winner is not None
        loser = game.winner.opponent
        return f"{mention(game.players[loser])} ({loser})"
