"""
Entry point: python -m slackchess.main --token <slack token> --url <public root url of this server>

The listen port is read from $PORT.
"""

import argparse
import atexit
import logging
import sys
from typing import Optional, Sequence

import uvicorn
from fastapi import FastAPI

from slackchess.api.app import create_app
from slackchess.chess.engine import StockfishEngine
from slackchess.core.config import Settings
from slackchess.core.exceptions import ConfigError
from slackchess.db.database import make_session_factory
from slackchess.db.sql_repository import SQLGameRepository
from slackchess.services.chess_service import ChessService
from slackchess.services.formatter import ResponseFormatter

_log = logging.getLogger(__name__)


def build_app(settings: Settings) -> FastAPI:
    """Wire the production collaborators: SQL repository, Stockfish, formatter."""
    repository = SQLGameRepository(make_session_factory(settings.database_url))
    engine = StockfishEngine(
        settings.stockfish_path,
        think_time=settings.engine_think_time,
        timeout=settings.engine_timeout,
    )
    atexit.register(engine.close)
    service = ChessService(repository, engine, ResponseFormatter(settings.base_url))
    return create_app(settings, service)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Slack slash command chess server")
    parser.add_argument("--token", default=None, help="slack token")
    parser.add_argument("--url", default=None, help="root url of the server")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO)
    args = parse_args(argv)
    try:
        settings = Settings.load(token=args.token, base_url=args.url)
    except ConfigError as e:
        _log.error("invalid configuration: %s", e)
        return 1

    _log.info("listening on %s, image links to %s", settings.listen_address, settings.base_url)
    uvicorn.run(build_app(settings), host=settings.host, port=settings.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
