"""
Move suggestions for the automated side of a game.

The Service only depends on the MoveSuggester protocol. StockfishEngine implements it by talking UCI to an external
engine process.
"""

import logging
import threading
from typing import Optional, Protocol

import chess
import chess.engine

from slackchess.core.exceptions import EngineUnavailableError

_log = logging.getLogger(__name__)


class MoveSuggester(Protocol):
    """Picks a move for the side to move."""

    def suggest_move(self, board: chess.Board) -> chess.Move:
        """Return a legal move for the position. Raise EngineUnavailableError if no answer can be given."""
        ...


class StockfishEngine:
    """UCI engine process, started on first use and restarted after it dies."""

    def __init__(
        self, path: str, think_time: float = 0.5, timeout: float = 5.0
    ) -> None:
        self.path = path
        self.think_time = think_time
        self.timeout = timeout
        self._engine: Optional[chess.engine.SimpleEngine] = None
        self._lock = threading.Lock()

    def suggest_move(self, board: chess.Board) -> chess.Move:
        # One search at a time per engine process
        with self._lock:
            try:
                engine = self._get_engine()
                result = engine.play(board, chess.engine.Limit(time=self.think_time))
            except (chess.engine.EngineError, TimeoutError, OSError) as e:
                _log.warning("engine failed on fen=%s: %r", board.fen(), e)
                self._shutdown()
                raise EngineUnavailableError(f"engine did not answer: {e!r}") from e

        if result.move is None:
            raise EngineUnavailableError(f"engine returned no move for {board.fen()}")
        _log.info("engine move=%s fen=%s", result.move.uci(), board.fen())
        return result.move

    def close(self) -> None:
        with self._lock:
            self._shutdown()

    def _get_engine(self) -> chess.engine.SimpleEngine:
        if self._engine is None:
            # `timeout` bounds every exchange with the process on top of the search time limit
            self._engine = chess.engine.SimpleEngine.popen_uci(
                self.path, timeout=self.timeout
            )
        return self._engine

    def _shutdown(self) -> None:
        if self._engine is None:
            return
        try:
            self._engine.quit()
        except (chess.engine.EngineError, TimeoutError, OSError):
            _log.warning("engine did not quit cleanly")
        finally:
            self._engine = None
