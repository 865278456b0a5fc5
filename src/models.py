"""Data models (Pydantic) for irclog.

- SessionConfig: resolved settings handed to the session engine
- Memo: a message left for an absent user
- StoredMemo: a Memo plus its recipient, as persisted to NDJSON
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

STDOUT_SENTINEL = "-"


# --- Session configuration ---

class SessionConfig(BaseModel):
    """Immutable settings for one logging session.

    ``channel`` is stored without its leading ``#``; ``log_dir`` equal to
    ``"-"`` sends the log to standard output instead of dated files.
    """

    model_config = ConfigDict(frozen=True)

    server: str = Field(min_length=1)
    port: int = Field(ge=1, le=65535)
    nick: str = Field(min_length=1)
    channel: str = Field(min_length=1)
    log_dir: str = "."
    admins: frozenset[str] = frozenset()
    history_max: int = Field(default=100, ge=1)
    rotation_interval: float = Field(default=3600.0, gt=0)
    send_delay: float = Field(default=0.4, ge=0)
    connect_timeout: float = Field(default=30.0, gt=0)
    memo_store_path: Optional[str] = None

    @field_validator("channel")
    @classmethod
    def _strip_hash(cls, v: str) -> str:
        v = v.strip().lstrip("#")
        if not v:
            raise ValueError("channel name is empty")
        return v

    @field_validator("admins", mode="before")
    @classmethod
    def _split_admins(cls, v):
        if isinstance(v, str):
            v = v.split(",")
        return frozenset(n.strip() for n in v if n and n.strip())

    @property
    def channel_target(self) -> str:
        """Channel name as used on the wire (``#chan``)."""
        return f"#{self.channel}"

    @property
    def logs_to_stdout(self) -> bool:
        return self.log_dir == STDOUT_SENTINEL

    def is_admin(self, nick: str) -> bool:
        return nick in self.admins


# --- Memos ---

class Memo(BaseModel):
    """A pending memo awaiting its recipient's next join."""

    model_config = ConfigDict(frozen=True)

    author: str
    created_at: datetime
    text: str


class StoredMemo(Memo):
    """Memo with its recipient, one NDJSON line per memo."""

    recipient: str

    def to_memo(self) -> Memo:
        return Memo(author=self.author, created_at=self.created_at, text=self.text)
