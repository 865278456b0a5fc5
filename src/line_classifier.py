"""Line classifier for the IRC wire protocol.

Turns one raw server line into a tagged event. Only the handful of verbs the
logger acts on are recognised; everything else degrades to ``Other`` and is
logged verbatim.

Examples:
    PING :irc.example.org                                  -> Ping
    :alice!~alice@host PRIVMSG #test :hello there          -> ChatMessage
    :bob!~bob@host JOIN #test                              -> Join
    :irc.example.org 001 logbot :Welcome                   -> Other
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

DEFAULT_HISTORY_COUNT = 10


@dataclass(frozen=True, slots=True)
class Ping:
    token: str


@dataclass(frozen=True, slots=True)
class ChatMessage:
    sender: str
    target: str
    text: str


@dataclass(frozen=True, slots=True)
class Join:
    nick: str
    channel: str = ""


@dataclass(frozen=True, slots=True)
class Other:
    raw: str


LineEvent = Union[Ping, ChatMessage, Join, Other]


_RE_PING = re.compile(r"^PING :?(.*)$", re.IGNORECASE)

# :nick!user@host PRIVMSG #channel :text
_RE_PRIVMSG = re.compile(
    r"^:([^!\s]+)!\S* "  # :nick!user@host
    r"PRIVMSG (#\S+) "  # verb + channel
    r":(.*)$"  # trailing text
)

# :nick!user@host JOIN #channel  (some servers send JOIN :#channel)
_RE_JOIN = re.compile(r"^:([^!\s]+)!\S* JOIN :?(#\S+)")

_RE_HISTORY = re.compile(r"^!history(?:\s+(\d+))?\s*$")
_RE_MEMO = re.compile(r"^memo\s+([^\s:]+):\s*(.+?)\s*$")


def classify_line(line: str) -> LineEvent:
    """Classify a raw protocol line (without its line terminator).

    Never raises; unrecognised input is returned as ``Other``.
    """
    m = _RE_PING.match(line)
    if m:
        return Ping(token=m.group(1))

    m = _RE_PRIVMSG.match(line)
    if m:
        return ChatMessage(sender=m.group(1), target=m.group(2), text=m.group(3))

    m = _RE_JOIN.match(line)
    if m:
        return Join(nick=m.group(1), channel=m.group(2))

    return Other(raw=line)


def display_line(event: LineEvent, raw: str) -> str:
    """Return the form used for both the log file and the history buffer.

    Chat messages become ``sender: text``; anything else keeps its raw line.
    """
    if isinstance(event, ChatMessage):
        return f"{event.sender}: {event.text}"
    return raw


def parse_history_request(text: str) -> int | None:
    """Parse ``!history [N]``. Returns the requested count, or None."""
    m = _RE_HISTORY.match(text.strip())
    if not m:
        return None
    if m.group(1) is None:
        return DEFAULT_HISTORY_COUNT
    return int(m.group(1))


def parse_memo_command(text: str) -> tuple[str, str] | None:
    """Parse ``memo <recipient>: <text>`` into (recipient, text), or None."""
    m = _RE_MEMO.match(text.strip())
    if not m:
        return None
    return m.group(1), m.group(2)
