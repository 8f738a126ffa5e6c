"""
Squares to highlight on a rendered board.

Squares are the rules engine's integer indices (0 = a1 ... 63 = h8). Highlighting is cosmetic, so parsing is
permissive: anything that is not a square label is ignored.
"""

import chess

# label -> index, e.g. 'a1' -> 0
SQUARES_BY_NAME: dict[str, chess.Square] = {
    name: square for square, name in zip(chess.SQUARES, chess.SQUARE_NAMES)
}


def square_from_name(name: str) -> chess.Square | None:
    """Case sensitive lookup: 'e4' is a square, 'E4' is not."""
    return SQUARES_BY_NAME.get(name)


def parse_squares(value: str) -> list[chess.Square]:
    """s must be in the format: a1,b2,c3. Empty entries and unknown labels are dropped, order and repeats are kept."""
    squares = []
    for token in value.split(","):
        if not token:
            continue
        square = square_from_name(token)
        if square is not None:
            squares.append(square)
    return squares


def format_squares(squares: list[chess.Square]) -> str:
    """Reverse of parse_squares."""
    return ",".join(chess.square_name(square) for square in squares)
