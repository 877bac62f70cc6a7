"""Bounded, newest-first log of rolls and sheet events."""

from collections import deque
from collections.abc import Callable
from datetime import datetime


def _clock_stamp() -> str:
    return datetime.now().strftime("%H:%M:%S")


class RollLog:
    """Keeps the last *limit* entries, newest first."""

    def __init__(self, limit: int = 12, clock: Callable[[], str] = _clock_stamp) -> None:
        self._entries: deque[str] = deque(maxlen=max(1, limit))
        self._clock = clock

    def push(self, text: str) -> str:
        entry = f"{self._clock()} - {text}"
        self._entries.appendleft(entry)
        return entry

    def entries(self) -> list[str]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
