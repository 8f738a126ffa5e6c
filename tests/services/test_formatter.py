"""Unit tests for slackchess/services/formatter.py"""

import chess

from slackchess.chess.game import Game
from slackchess.core.exceptions import NotYourTurnError
from slackchess.core.shared_types import ENGINE_PLAYER
from slackchess.services.formatter import ResponseFormatter

BASE_URL = "https://chess.example.com"


def test_base_url_trailing_slash() -> None:
    formatter = ResponseFormatter(f"{BASE_URL}/")
    url = formatter.board_image_url(chess.Board())
    assert url == f"{BASE_URL}/board/rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR.png"


def test_image_url_with_highlights() -> None:
    formatter = ResponseFormatter(BASE_URL)
    board = chess.Board()
    board.push_san("e4")
    url = formatter.board_image_url(board, [chess.E2, chess.E4])
    assert url == f"{BASE_URL}/board/rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR.png?markSquares=e2,e4"


def test_image_url_is_deterministic() -> None:
    formatter = ResponseFormatter(BASE_URL)
    first = formatter.board_image_url(chess.Board(), [chess.A1])
    second = formatter.board_image_url(chess.Board(), [chess.A1])
    assert first == second


def test_game_response() -> None:
    formatter = ResponseFormatter(BASE_URL)
    game = Game.new_game("C1", white="U1", black=ENGINE_PLAYER)
    game.make_move("e4", "U1")

    response = formatter.game_response(game, "hello")

    assert response.response_type == "in_channel"
    assert response.text == "hello"
    attachment = response.attachments[0]
    assert attachment.text.splitlines() == [
        f"White: <@U1>  Black: {ENGINE_PLAYER}",
        "Last move: e4",
        f"{ENGINE_PLAYER} (black) to move.",
    ]
    assert attachment.image_url is not None
    assert attachment.image_url.endswith("?markSquares=e2,e4")


def test_check_is_reported() -> None:
    formatter = ResponseFormatter(BASE_URL)
    game = Game.new_game("C1", white="U1", black="U2")
    for move in ["e4", "f5", "Qh5+"]:
        game.make_move(move, game.player_to_move)
    assert formatter.summary(game).endswith("Check! <@U2> (black) to move.")


def test_resignation_summary() -> None:
    formatter = ResponseFormatter(BASE_URL)
    game = Game.new_game("C1", white="U1", black="U2")
    game.resign("U1")
    assert formatter.summary(game).endswith("<@U1> (white) resigned. <@U2> (black) wins.")


def test_error_response() -> None:
    response = ResponseFormatter(BASE_URL).error_response(NotYourTurnError("wait"))
    assert response.response_type == "ephemeral"
    assert response.text == "wait"
    assert response.attachments == []
