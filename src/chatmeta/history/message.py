"""The slice of the message model that history metadata consumes.

Messages are owned by the buffer layer; metadata only reads their server
time, where they came from, and the unread/reference predicates.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from chatmeta.history.metadata import MessageReferences


@dataclass(frozen=True)
class User:
    """Sent by a user (privmsg / notice)."""

    nick: str


@dataclass(frozen=True)
class Action:
    """A CTCP ACTION sent by a user."""

    nick: str


@dataclass(frozen=True)
class ServerSource:
    """Numerics and other server-originated lines."""

    kind: str | None = None


@dataclass(frozen=True)
class InternalStatus:
    """Client status lines (connecting, disconnected, ...)."""

    status: str


@dataclass(frozen=True)
class InternalLogs:
    """Entries of the client's own logs view."""


Source = User | Action | ServerSource | InternalStatus | InternalLogs


class Message(Protocol):
    """A buffered chat message."""

    @property
    def server_time(self) -> datetime: ...

    @property
    def source(self) -> Source: ...

    def triggers_unread(self) -> bool: ...

    def can_reference(self) -> bool: ...

    def references(self) -> MessageReferences: ...
