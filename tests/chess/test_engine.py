"""Unit tests for slackchess/chess/engine.py (no engine binary needed)"""

import chess
import chess.engine
import pytest

from slackchess.chess.engine import StockfishEngine
from slackchess.core.exceptions import EngineUnavailableError


class ScriptedProcess:
    """Stands in for chess.engine.SimpleEngine."""

    def __init__(self, result=None, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.limits: list[chess.engine.Limit] = []
        self.quit_called = False

    def play(self, board: chess.Board, limit: chess.engine.Limit) -> chess.engine.PlayResult:
        self.limits.append(limit)
        if self.error:
            raise self.error
        return self.result

    def quit(self) -> None:
        self.quit_called = True


def engine_with(process: ScriptedProcess, monkeypatch: pytest.MonkeyPatch) -> StockfishEngine:
    monkeypatch.setattr(
        chess.engine.SimpleEngine, "popen_uci", lambda *args, **kwargs: process
    )
    return StockfishEngine("stockfish", think_time=0.2, timeout=1.0)


def test_suggest_move(monkeypatch: pytest.MonkeyPatch) -> None:
    move = chess.Move.from_uci("e2e4")
    process = ScriptedProcess(result=chess.engine.PlayResult(move, None))
    engine = engine_with(process, monkeypatch)

    assert engine.suggest_move(chess.Board()) == move
    assert process.limits[0].time == 0.2


@pytest.mark.parametrize(
    "error",
    [TimeoutError(), chess.engine.EngineTerminatedError("died"), FileNotFoundError("stockfish")],
)
def test_engine_failure(error: Exception, monkeypatch: pytest.MonkeyPatch) -> None:
    process = ScriptedProcess(error=error)
    engine = engine_with(process, monkeypatch)

    with pytest.raises(EngineUnavailableError):
        engine.suggest_move(chess.Board())
    # the broken process is discarded and restarted on next use
    assert process.quit_called


def test_no_move(monkeypatch: pytest.MonkeyPatch) -> None:
    process = ScriptedProcess(result=chess.engine.PlayResult(None, None))
    engine = engine_with(process, monkeypatch)
    with pytest.raises(EngineUnavailableError):
        engine.suggest_move(chess.Board())


def test_close(monkeypatch: pytest.MonkeyPatch) -> None:
    process = ScriptedProcess(result=chess.engine.PlayResult(chess.Move.from_uci("e2e4"), None))
    engine = engine_with(process, monkeypatch)
    engine.suggest_move(chess.Board())
    engine.close()
    assert process.quit_called
