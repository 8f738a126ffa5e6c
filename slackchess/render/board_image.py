"""
Board image rendering.

Same position + same highlights always give byte-identical PNGs: the image endpoint serves them with a one year
cache lifetime.
"""

import io
import logging
from typing import Iterable, Optional

import chess
from PIL import Image, ImageDraw, ImageFont

from slackchess.core.exceptions import RenderError

_log = logging.getLogger(__name__)

# Board rendering settings
SQUARE_SIZE = 64
BOARD_SIZE = SQUARE_SIZE * 8  # 512 x 512 pixels

# Colors (RGB)
LIGHT_SQUARE = (240, 217, 181)
DARK_SQUARE = (181, 136, 99)
HIGHLIGHT = (246, 246, 105)
HIGHLIGHT_ALPHA = 0.5
WHITE_PIECE = (255, 255, 255)
BLACK_PIECE = (30, 30, 30)
PIECE_OUTLINE = (0, 0, 0)

# Filled symbols for both sides, the disc behind the glyph tells the colors apart
PIECE_SYMBOLS = {
    chess.KING: "♚",
    chess.QUEEN: "♛",
    chess.ROOK: "♜",
    chess.BISHOP: "♝",
    chess.KNIGHT: "♞",
    chess.PAWN: "♟",
}

FONT_PATHS = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/usr/share/fonts/noto/NotoSansSymbols2-Regular.ttf",
]


def _load_font() -> tuple[ImageFont.ImageFont | ImageFont.FreeTypeFont, bool]:
    """Font with chess symbols if one is installed, else Pillow's default font (pieces drawn as letters)."""
    for path in FONT_PATHS:
        try:
            return ImageFont.truetype(path, SQUARE_SIZE // 2), True
        except OSError:
            continue
    _log.info("no font with chess symbols found, drawing pieces as letters")
    return ImageFont.load_default(), False


_FONT, _HAS_SYMBOLS = _load_font()


def square_box(square: chess.Square) -> tuple[int, int, int, int]:
    """Pixel box of a square, white at the bottom (a1 in the lower left corner)."""
    x0 = chess.square_file(square) * SQUARE_SIZE
    y0 = (7 - chess.square_rank(square)) * SQUARE_SIZE
    return x0, y0, x0 + SQUARE_SIZE - 1, y0 + SQUARE_SIZE - 1


def square_color(square: chess.Square) -> tuple[int, int, int]:
    is_light = (chess.square_file(square) + chess.square_rank(square)) % 2 == 1
    return LIGHT_SQUARE if is_light else DARK_SQUARE


def _blend(base: tuple[int, int, int], tint: tuple[int, int, int]) -> tuple[int, int, int]:
    r, g, b = (
        round(c * (1 - HIGHLIGHT_ALPHA) + t * HIGHLIGHT_ALPHA) for c, t in zip(base, tint)
    )
    return r, g, b


def _piece_label(piece: chess.Piece) -> str:
    if _HAS_SYMBOLS:
        return PIECE_SYMBOLS[piece.piece_type]
    return piece.symbol().upper()


def _draw_piece(draw: ImageDraw.ImageDraw, square: chess.Square, piece: chess.Piece) -> None:
    x0, y0, x1, y1 = square_box(square)
    margin = SQUARE_SIZE // 10
    is_white = piece.color == chess.WHITE
    disc = WHITE_PIECE if is_white else BLACK_PIECE
    glyph = BLACK_PIECE if is_white else WHITE_PIECE
    draw.ellipse(
        [x0 + margin, y0 + margin, x1 - margin, y1 - margin],
        fill=disc,
        outline=PIECE_OUTLINE,
        width=2,
    )
    label = _piece_label(piece)
    left, top, right, bottom = draw.textbbox((0, 0), label, font=_FONT)
    text_x = (x0 + x1 + 1) // 2 - (right - left) // 2 - left
    text_y = (y0 + y1 + 1) // 2 - (bottom - top) // 2 - top
    draw.text((text_x, text_y), label, fill=glyph, font=_FONT)


def render_board(
    board: chess.Board, highlights: Iterable[chess.Square] = ()
) -> Image.Image:
    """8x8 grid, alternating square colors, highlighted squares tinted, one disc + glyph per piece."""
    marked = {square for square in highlights if square in chess.SQUARES}
    image = Image.new("RGB", (BOARD_SIZE, BOARD_SIZE))
    draw = ImageDraw.Draw(image)

    for square in chess.SQUARES:
        color = square_color(square)
        if square in marked:
            color = _blend(color, HIGHLIGHT)
        draw.rectangle(square_box(square), fill=color)

        piece: Optional[chess.Piece] = board.piece_at(square)
        if piece:
            _draw_piece(draw, square, piece)

    return image


def render_png(board: chess.Board, highlights: Iterable[chess.Square] = ()) -> bytes:
    """PNG bytes of the rendered board."""
    try:
        image = render_board(board, highlights)
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
    except (OSError, ValueError) as e:
        raise RenderError(f"could not render board {board.board_fen()}: {e}") from e
    return buffer.getvalue()
