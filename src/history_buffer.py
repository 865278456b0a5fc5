"""Bounded in-memory history of recently logged display lines."""

from __future__ import annotations

from collections import deque

DEFAULT_HISTORY_MAX = 100


class HistoryBuffer:
    """FIFO of the most recent display lines, oldest evicted first.

    Not synchronized on its own; callers share the session lock.
    """

    def __init__(self, max_entries: int = DEFAULT_HISTORY_MAX) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self._max_entries = max_entries
        self._entries: deque[str] = deque()

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, entry: str) -> None:
        self._entries.append(entry)
        while len(self._entries) > self._max_entries:
            self._entries.popleft()

    def tail(self, n: int) -> list[str]:
        """Return the last ``n`` entries in original order (clamped to length)."""
        if n <= 0:
            return []
        n = min(n, len(self._entries))
        return list(self._entries)[-n:]

    def snapshot(self) -> list[str]:
        return list(self._entries)
