"""TCP connection to the IRC server.

Sends are CRLF-terminated; received data is split on newlines and decoded as
UTF-8 with replacement so a stray byte never stops the read loop.
"""

from __future__ import annotations

import logging
import socket
import threading
from typing import Iterator

log = logging.getLogger("irclog.connection")


def handshake_lines(nick: str, channel_target: str) -> list[str]:
    """USER / NICK / JOIN lines sent once after connecting."""
    return [
        f"USER {nick} {nick}0 {nick}1 :{nick}",
        f"NICK {nick}",
        f"JOIN {channel_target}",
    ]


def pong_line(token: str) -> str:
    return f"PONG :{token}"


def privmsg_line(target: str, text: str) -> str:
    return f"PRIVMSG {target} :{text}"


class IrcConnection:
    """One ordered, bidirectional line stream to the server."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock
        self._reader = sock.makefile("rb")
        self._send_lock = threading.Lock()
        self._closed = False

    @classmethod
    def open(cls, host: str, port: int, timeout: float = 30.0) -> IrcConnection:
        """Connect to ``host:port``. Raises OSError if the server is unreachable."""
        sock = socket.create_connection((host, port), timeout=timeout)
        # The read loop blocks indefinitely once connected.
        sock.settimeout(None)
        log.info("Connected to %s:%d", host, port)
        return cls(sock)

    @property
    def closed(self) -> bool:
        return self._closed

    def send_line(self, line: str) -> None:
        data = (line + "\r\n").encode("utf-8")
        with self._send_lock:
            self._sock.sendall(data)
        log.debug("out> %s", line)

    def iter_lines(self) -> Iterator[str]:
        """Yield received lines until end-of-stream."""
        while True:
            raw = self._reader.readline()
            if not raw:
                return
            yield raw.decode("utf-8", errors="replace").rstrip("\r\n")

    def shutdown(self) -> None:
        """Half-close both directions; a blocked ``iter_lines`` sees end-of-stream."""
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass  # already disconnected

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.shutdown()
        self._reader.close()
        self._sock.close()
