"""Pending memos keyed by recipient nick.

Each recipient maps to a non-empty FIFO list of memos. ``drain`` removes the
whole list and returns it in one step, so a memo is handed out at most once.
When a path is given the store is mirrored to NDJSON and reloaded on start.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from models import Memo, StoredMemo
from ndjson_store import ndjson_append, ndjson_read, ndjson_write

logger = logging.getLogger(__name__)


class MemoStore:
    """Recipient nick -> ordered pending memos.

    Not synchronized on its own; callers share the session lock.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._memos: dict[str, list[Memo]] = {}
        if path is not None:
            self._load(path)

    def _load(self, path: Path) -> None:
        for stored in ndjson_read(path, StoredMemo):
            self._memos.setdefault(stored.recipient, []).append(stored.to_memo())
        if self._memos:
            logger.info("Loaded %d pending memo(s) for %d recipient(s) from %s",
                        sum(len(v) for v in self._memos.values()), len(self._memos), path)

    def add(
        self,
        recipient: str,
        author: str,
        text: str,
        at: datetime | None = None,
    ) -> Memo:
        memo = Memo(author=author, created_at=at or datetime.now(timezone.utc), text=text)
        self._memos.setdefault(recipient, []).append(memo)
        if self._path is not None:
            ndjson_append(
                self._path,
                StoredMemo(recipient=recipient, **memo.model_dump()),
            )
        return memo

    def drain(self, recipient: str) -> list[Memo]:
        """Remove and return every memo for ``recipient`` (empty if none)."""
        memos = self._memos.pop(recipient, None)
        if not memos:
            return []
        if self._path is not None:
            self._persist()
        return memos

    def pending(self, recipient: str) -> list[Memo]:
        return list(self._memos.get(recipient, ()))

    def recipients(self) -> list[str]:
        return list(self._memos)

    def __contains__(self, recipient: object) -> bool:
        return recipient in self._memos

    def __len__(self) -> int:
        return len(self._memos)

    def _persist(self) -> None:
        assert self._path is not None
        ndjson_write(
            self._path,
            (
                StoredMemo(recipient=recipient, **memo.model_dump())
                for recipient, memos in self._memos.items()
                for memo in memos
            ),
        )
