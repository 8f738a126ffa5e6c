"""
Position notation (FEN) as it appears in board image URLs.

Image links only carry the piece placement, so the trailing FEN fields are optional and get filled in with defaults
before the notation is handed to the rules engine.
"""

import chess

from slackchess.core.exceptions import InvalidPositionNotationError

STARTING_FEN = chess.STARTING_FEN

# Defaults for the fields following the piece placement: side to move, castling rights, en passant target,
# half-move clock and full-move number.
DEFAULT_TRAILING_FIELDS: tuple[str, ...] = ("w", "KQkq", "-", "0", "1")
NUM_FEN_FIELDS = 1 + len(DEFAULT_TRAILING_FIELDS)


def complete_fen(partial: str) -> str:
    """Append the default value for every omitted trailing field."""
    fields = partial.split()
    if not fields:
        raise InvalidPositionNotationError("empty position notation")
    if len(fields) > NUM_FEN_FIELDS:
        raise InvalidPositionNotationError(
            f"FEN has {len(fields)} fields, expected at most {NUM_FEN_FIELDS}: {partial!r}"
        )
    missing = DEFAULT_TRAILING_FIELDS[len(fields) - 1 :]
    return " ".join([*fields, *missing])


def parse_partial_position(path: str) -> chess.Board:
    """Decode a (possibly partial) FEN into a full position."""
    fen = complete_fen(path)
    try:
        return chess.Board(fen)
    except ValueError as e:
        raise InvalidPositionNotationError(str(e)) from e


def placement(board: chess.Board) -> str:
    """Piece placement field of the position (the part embedded in image URLs)."""
    return board.board_fen()
