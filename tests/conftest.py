"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Generator, Optional

import chess
import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from slackchess.api.models import SlashCommand
from slackchess.core.exceptions import EngineUnavailableError
from slackchess.db.memory_repository import InMemoryGameRepository
from slackchess.db.schema import Base
from slackchess.services.chess_service import ChessService
from slackchess.services.formatter import ResponseFormatter

BASE_URL = "https://chess.example.com"
TOKEN = "s3cr3t"
CHANNEL = "C0001"
WHITE_USER = "U0WHITE"
BLACK_USER = "U0BLACK"

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def db_session_factory() -> Generator[sessionmaker[Session], None, None]:
    """Connection to a test database. Tables are removed at teardown to make unit tests of repository independent of each other."""
    Base.metadata.create_all(bind=engine)
    try:
        yield TestingSessionLocal
    finally:
        Base.metadata.drop_all(bind=engine)


# --- MOCK DEPENDENCIES ----
class FakeEngine:
    """Deterministic MoveSuggester: plays the scripted moves if legal, else the first legal move (in UCI order)."""

    def __init__(self, script: Optional[list[str]] = None) -> None:
        self.script = list(script or [])
        self.available = True
        self.calls: list[str] = []

    def suggest_move(self, board: chess.Board) -> chess.Move:
        self.calls.append(board.fen())
        if not self.available:
            raise EngineUnavailableError("engine timed out")
        if self.script:
            return chess.Move.from_uci(self.script.pop(0))
        return min(board.legal_moves, key=lambda move: move.uci())


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def memory_repository() -> InMemoryGameRepository:
    return InMemoryGameRepository()


@pytest.fixture
def formatter() -> ResponseFormatter:
    return ResponseFormatter(BASE_URL)


@pytest.fixture
def service(
    memory_repository: InMemoryGameRepository,
    fake_engine: FakeEngine,
    formatter: ResponseFormatter,
) -> ChessService:
    return ChessService(memory_repository, fake_engine, formatter)


def slash(text: str, user: str = WHITE_USER, channel: str = CHANNEL) -> SlashCommand:
    """Slash command as Slack would post it."""
    return SlashCommand(
        token=TOKEN,
        channel_id=channel,
        user_id=user,
        text=text,
        command="/chess",
    )
