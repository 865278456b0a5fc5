"""Session engine: one IRC connection, one channel, one log.

Owns the connection, runs the blocking read loop, classifies each line and
keeps the history buffer, the memo store and the log sink up to date. A
background timer re-derives the log file every ``rotation_interval`` seconds.

Sink, history and memos share one lock. It is held for each bookkeeping step
and released before any network send or inter-message delay, so a slow
history replay never blocks rotation.
"""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterator, Protocol, TextIO

from history_buffer import HistoryBuffer
from irc_connection import IrcConnection, handshake_lines, pong_line, privmsg_line
from line_classifier import (
    ChatMessage,
    Join,
    Ping,
    classify_line,
    display_line,
    parse_history_request,
    parse_memo_command,
)
from log_sink import LogSink, LogSinkError
from memo_store import MemoStore
from models import Memo, SessionConfig
from rotation_timer import RotationTimer

log = logging.getLogger("irclog.session")


class Connection(Protocol):
    def send_line(self, line: str) -> None: ...

    def iter_lines(self) -> Iterator[str]: ...

    def shutdown(self) -> None: ...

    def close(self) -> None: ...


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def memo_announcement(recipient: str, memo: Memo) -> str:
    t = memo.created_at.astimezone(timezone.utc)
    return f"{recipient}: (memo from {memo.author} at {t.strftime('%Y-%m-%d %H:%M:%S')} utc) {memo.text}"


class SessionEngine:
    """Logs one channel and serves history replay and memos to admins."""

    def __init__(
        self,
        config: SessionConfig,
        *,
        connect: Callable[[str, int, float], Connection] = IrcConnection.open,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = utc_now,
        stream: TextIO | None = None,
    ) -> None:
        self._config = config
        self._connect = connect
        self._sleep = sleep
        self._clock = clock
        self._lock = threading.Lock()
        self._sink = LogSink(config.log_dir, config.server, config.channel, stream=stream)
        self._history = HistoryBuffer(config.history_max)
        self._memos = MemoStore(Path(config.memo_store_path) if config.memo_store_path else None)
        self._timer = RotationTimer(config.rotation_interval, self.rotate)
        self._connection: Connection | None = None
        self._stopping = False

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def history(self) -> HistoryBuffer:
        return self._history

    @property
    def memos(self) -> MemoStore:
        return self._memos

    @property
    def sink(self) -> LogSink:
        return self._sink

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Connect, log until the server closes the connection, then clean up.

        Raises OSError if the server can't be reached, the first log file
        can't be opened, or a log write fails.
        """
        try:
            self.connect()
            if self._stopping:
                log.info("Shutdown requested during connect")
                return
            self.open_log()
            self._timer.start()
            self._read_loop()
        finally:
            self._timer.stop()
            with self._lock:
                self._sink.close()
            if self._connection is not None:
                self._connection.close()
            log.info("Session ended")

    def connect(self) -> None:
        """Open the connection and send the USER/NICK/JOIN handshake."""
        cfg = self._config
        log.info("Connecting to %s:%d as %s", cfg.server, cfg.port, cfg.nick)
        self._connection = self._connect(cfg.server, cfg.port, cfg.connect_timeout)
        for line in handshake_lines(cfg.nick, cfg.channel_target):
            self._send(line)

    def open_log(self) -> None:
        with self._lock:
            self._sink.open(self._clock())

    def stop(self) -> None:
        """Make the read loop end; ``run`` then shuts down normally."""
        self._stopping = True
        if self._connection is not None:
            self._connection.shutdown()

    def rotate(self) -> Path | None:
        """Re-derive the log target. On failure the previous target stays active."""
        with self._lock:
            try:
                return self._sink.rotate(self._clock())
            except LogSinkError as e:
                log.error("Rotation failed, keeping current log target: %s", e)
                return self._sink.path

    # ------------------------------------------------------------------
    # Read loop
    # ------------------------------------------------------------------

    def _read_loop(self) -> None:
        assert self._connection is not None
        lines = self._connection.iter_lines()
        while True:
            # Only read errors end the session quietly; handle_line errors propagate.
            try:
                line = next(lines)
            except StopIteration:
                break
            except OSError as e:
                if not self._stopping:
                    log.warning("Connection lost: %s", e)
                return
            self.handle_line(line)
        log.info("Connection closed%s", " (shutdown requested)" if self._stopping else " by server")

    def handle_line(self, line: str) -> None:
        line = line.rstrip("\r\n")
        if not line.strip():
            return

        event = classify_line(line)
        if isinstance(event, Ping):
            self._send(pong_line(event.token))
            return

        from_admin = isinstance(event, ChatMessage) and self._config.is_admin(event.sender)

        if from_admin:
            count = parse_history_request(event.text)
            if count is not None:
                self._replay_history(event.sender, count)

        if isinstance(event, Join):
            self._deliver_memos(event.nick)

        if from_admin:
            memo = parse_memo_command(event.text)
            if memo is not None:
                recipient, text = memo
                with self._lock:
                    self._memos.add(recipient, event.sender, text, at=self._clock())
                log.info("Memo for %s stored (from %s)", recipient, event.sender)

        self._log(display_line(event, line))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _log(self, display: str) -> None:
        with self._lock:
            self._sink.write(display, self._clock())
            self._history.append(display)

    def _send(self, line: str) -> None:
        if self._connection is None:
            raise RuntimeError("not connected")
        self._connection.send_line(line)

    def _replay_history(self, requester: str, count: int) -> None:
        with self._lock:
            entries = self._history.tail(count)
        log.info("Replaying %d history line(s) to %s", len(entries), requester)
        for i, entry in enumerate(entries):
            if i:
                self._sleep(self._config.send_delay)
            self._send(privmsg_line(requester, entry))

    def _deliver_memos(self, nick: str) -> None:
        with self._lock:
            memos = self._memos.drain(nick)
        if not memos:
            return
        log.info("Delivering %d memo(s) to %s", len(memos), nick)
        for i, memo in enumerate(memos):
            if i:
                self._sleep(self._config.send_delay)
            text = memo_announcement(nick, memo)
            self._send(privmsg_line(self._config.channel_target, text))
            self._log(f"{self._config.nick}: {text}")
