"""One lock per channel: commands for the same channel run one at a time, other channels are not blocked."""

import threading
from contextlib import contextmanager
from typing import Iterator


class ChannelLocks:
    """Locks are created on first use and dropped once no request holds or waits for them."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._users: dict[str, int] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, channel_id: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(channel_id, threading.Lock())
            self._users[channel_id] = self._users.get(channel_id, 0) + 1
        try:
            with lock:
                yield
        finally:
            self._release(channel_id)

    def _release(self, channel_id: str) -> None:
        with self._guard:
            self._users[channel_id] -= 1
            if self._users[channel_id] == 0:
                del self._users[channel_id]
                del self._locks[channel_id]
