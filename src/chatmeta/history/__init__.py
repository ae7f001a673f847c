"""Conversation history bookkeeping.

Read markers, unread triggers and CHATHISTORY references, persisted per
conversation scope.
"""

from chatmeta.history.errors import (
    DirectoryError,
    HistoryError,
    SerializationError,
    StorageIOError,
)
from chatmeta.history.kind import (
    Channel,
    Highlights,
    Kind,
    Logs,
    Query,
    Server,
    parse_kind,
)
from chatmeta.history.message import Message, Source
from chatmeta.history.metadata import (
    LoadOutcome,
    MessageReferences,
    Metadata,
    MetadataStore,
    ReadMarker,
    latest_can_reference,
    latest_triggers_unread,
)

__all__ = [
    "Channel",
    "DirectoryError",
    "Highlights",
    "HistoryError",
    "Kind",
    "LoadOutcome",
    "Logs",
    "Message",
    "MessageReferences",
    "Metadata",
    "MetadataStore",
    "Query",
    "ReadMarker",
    "SerializationError",
    "Server",
    "Source",
    "StorageIOError",
    "latest_can_reference",
    "latest_triggers_unread",
    "parse_kind",
]
