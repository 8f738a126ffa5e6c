"""
FastAPI application: the Slack webhook, the board image endpoint and a liveness check.

Game-logic failures never reach this layer as errors (the Service answers them with text). What is handled here:
transport decoding, token checks, position notation of image URLs and rendering failures.
"""

import logging
import secrets

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from slackchess.api.models import SlashCommand
from slackchess.chess.fen import parse_partial_position
from slackchess.chess.square import parse_squares
from slackchess.core.config import Settings
from slackchess.core.exceptions import (
    AuthError,
    InvalidPositionNotationError,
    RenderError,
    RepositoryError,
    TransportDecodeError,
)
from slackchess.render.board_image import render_png
from slackchess.services.chess_service import ChessService

_log = logging.getLogger(__name__)

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
IMAGE_CACHE_CONTROL = "max-age=31536000"


def _describe(request: Request) -> str:
    client = request.client.host if request.client else "-"
    return f"{client} {request.method} {request.url.path}"


def create_app(settings: Settings, service: ChessService) -> FastAPI:
    app = FastAPI(title="slackchess")

    # -- logging / error mapping --
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        client = request.client.host if request.client else "-"
        _log.info("%s %s %s", client, request.method, request.url)
        return await call_next(request)

    @app.exception_handler(TransportDecodeError)
    async def handle_decode_error(request: Request, exc: TransportDecodeError) -> Response:
        _log.warning("%s could not decode slash command: %s", _describe(request), exc)
        return PlainTextResponse(str(exc), status_code=500)

    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError) -> Response:
        _log.warning("%s %s", _describe(request), exc)
        return PlainTextResponse("invalid token", status_code=400)

    @app.exception_handler(InvalidPositionNotationError)
    async def handle_invalid_position(
        request: Request, exc: InvalidPositionNotationError
    ) -> Response:
        _log.warning("%s could not parse fen: %s", _describe(request), exc)
        return PlainTextResponse(f"could not parse fen {exc}", status_code=404)

    @app.exception_handler(RenderError)
    async def handle_render_error(request: Request, exc: RenderError) -> Response:
        _log.error("%s %s", _describe(request), exc)
        return PlainTextResponse(str(exc), status_code=500)

    @app.exception_handler(RepositoryError)
    async def handle_repository_error(request: Request, exc: RepositoryError) -> Response:
        _log.error("%s could not store game: %s", _describe(request), exc)
        return PlainTextResponse("could not store game, please retry", status_code=500)

    # -- routes --
    @app.get("/")
    def up() -> PlainTextResponse:
        return PlainTextResponse("up")

    @app.api_route("/command", methods=ALL_METHODS)
    async def command(request: Request) -> Response:
        """Slack slash command webhook (form encoded POST)."""
        if request.method != "POST":
            return PlainTextResponse("", status_code=404)

        try:
            form = await request.form()
        except StarletteHTTPException as e:
            raise TransportDecodeError(e.detail) from e
        slash_command = SlashCommand.from_form_items(form.multi_items())

        if not secrets.compare_digest(slash_command.token, settings.token):
            raise AuthError(f"invalid token from user={slash_command.user_id}")

        _log.info(
            "slash command channel=%s user=%s text=%r",
            slash_command.channel_id,
            slash_command.user_id,
            slash_command.text,
        )
        response = await run_in_threadpool(service.handle, slash_command)
        _log.info("sending response %s", response.text)
        return JSONResponse(response.model_dump(exclude_none=True))

    @app.api_route("/board/{position_path:path}", methods=ALL_METHODS)
    def board_image(
        request: Request,
        position_path: str,
        mark_squares: str = Query("", alias="markSquares"),
    ) -> Response:
        """PNG of the position in the path (partial FEN), with the squares in ?markSquares=a1,b2 highlighted."""
        if request.method != "GET":
            return PlainTextResponse("", status_code=404)

        fen = position_path.removesuffix(".png")
        board = parse_partial_position(fen)
        squares = parse_squares(mark_squares)
        _log.info("creating image for fen %s marks=%s", fen, mark_squares)
        return Response(
            content=render_png(board, squares),
            media_type="image/png",
            headers={"Cache-Control": IMAGE_CACHE_CONTROL},
        )

    return app
