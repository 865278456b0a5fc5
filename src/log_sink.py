"""Log sink: the single open output target for channel traffic.

The target is either a stream (standard output, selected with ``-`` as the
directory) or ``{dir}/{server}_{channel}_{YYYY-MM-DD}.txt`` opened in append
mode. ``rotate`` re-derives the path from the current UTC date, so the first
tick after midnight starts a new file.
"""

from __future__ import annotations

import logging
import sys
from datetime import date, datetime, timezone
from pathlib import Path
from typing import TextIO

from models import STDOUT_SENTINEL

logger = logging.getLogger(__name__)


class LogSinkError(OSError):
    """Raised when a log target cannot be opened."""


def log_path(directory: str | Path, server: str, channel: str, day: date) -> Path:
    """Return ``{directory}/{server}_{channel}_{YYYY-MM-DD}.txt``."""
    return Path(directory) / f"{server}_{channel}_{day.strftime('%Y-%m-%d')}.txt"


def format_log_line(display: str, now: datetime) -> str:
    """Prefix a display line with ``YYYY-MM-DD HH:MM:SS utc``."""
    t = now.astimezone(timezone.utc)
    return f"{t.strftime('%Y-%m-%d %H:%M:%S')} utc {display}"


class LogSink:
    """Owns the current output target. Not synchronized on its own."""

    def __init__(
        self,
        directory: str,
        server: str,
        channel: str,
        *,
        stream: TextIO | None = None,
    ) -> None:
        self._directory = directory
        self._server = server
        self._channel = channel
        self._stream = stream if stream is not None else sys.stdout
        self._file: TextIO | None = None
        self._path: Path | None = None

    @property
    def is_stdout(self) -> bool:
        return self._directory == STDOUT_SENTINEL

    @property
    def path(self) -> Path | None:
        """Current file path, or None for the stream target."""
        return self._path

    @property
    def is_open(self) -> bool:
        return self.is_stdout or self._file is not None

    def path_for(self, now: datetime) -> Path:
        return log_path(self._directory, self._server, self._channel, now.astimezone(timezone.utc).date())

    def open(self, now: datetime) -> None:
        """Open the initial target. Raises LogSinkError if the file can't be opened."""
        self.rotate(now)

    def rotate(self, now: datetime) -> Path | None:
        """Re-derive and (re)open the target for ``now``.

        The new file is opened before the old one is closed, so a failed open
        leaves the previous target in place and raises LogSinkError.
        """
        if self.is_stdout:
            return None

        path = self.path_for(now)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            new_file = open(path, "a", encoding="utf-8")
        except OSError as e:
            raise LogSinkError(f"cannot open log file {path}: {e}") from e

        old_file, old_path = self._file, self._path
        self._file, self._path = new_file, path
        if old_file is not None:
            old_file.close()
        if old_path != path:
            logger.info("Logging to %s", path)
        return path

    def write(self, display: str, now: datetime) -> None:
        """Write one timestamped line and flush it."""
        out = self._stream if self.is_stdout else self._file
        if out is None:
            raise LogSinkError("log sink is not open")
        out.write(format_log_line(display, now) + "\n")
        out.flush()

    def close(self) -> None:
        """Close a file target. The stream target is left open."""
        if self._file is not None:
            self._file.close()
            self._file = None
