"""Per-conversation history metadata.

Each conversation scope gets one small JSON file in the history directory:

{
    "read_marker": "2024-05-01T12:30:45.123Z",
    "last_triggers_unread": "2024-05-01T12:31:02.000Z",
    "chathistory_references": {
        "timestamp": "2024-05-01T12:31:02.000Z",
        "id": "abc123"
    }
}

Absent fields are omitted. Files are named by a 64-bit hash of the scope's
composite key, so user-controlled nicks and channel names never reach the
filesystem. Distinct scopes whose keys hash identically share a file.
"""

from __future__ import annotations

import asyncio
import logging
import tempfile
import weakref
from collections.abc import AsyncIterator, Iterable, Sequence
from contextlib import asynccontextmanager
from datetime import datetime
from enum import StrEnum
from functools import total_ordering
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import aiofiles
import aiofiles.os
import seahash
from pydantic import (
    AfterValidator,
    AwareDatetime,
    BaseModel,
    ConfigDict,
    PlainSerializer,
    RootModel,
    ValidationError,
)
from pydantic_core import PydanticSerializationError

from chatmeta.config.paths import get_history_path
from chatmeta.history.errors import DirectoryError, SerializationError, StorageIOError
from chatmeta.history.kind import Channel, Highlights, Kind, Logs, Query, Server
from chatmeta.history.message import InternalStatus, Message
from chatmeta.isupport import (
    MessageIdReference,
    MessageReference,
    MessageReferenceType,
    NoReference,
    TimestampReference,
)
from chatmeta.timestamps import (
    format_millis,
    format_rfc3339,
    parse_rfc3339,
    to_utc,
    truncate_millis,
)

if TYPE_CHECKING:
    from chatmeta.config.models import ChatmetaConfig

logger = logging.getLogger(__name__)

METADATA_SUFFIX = ".json"

# Read markers and unread times are held and stored at millisecond precision
MillisDateTime = Annotated[
    AwareDatetime,
    AfterValidator(truncate_millis),
    PlainSerializer(format_millis, return_type=str),
]
UtcDateTime = Annotated[
    AwareDatetime,
    AfterValidator(to_utc),
    PlainSerializer(format_rfc3339, return_type=str),
]


@total_ordering
class ReadMarker(RootModel[MillisDateTime]):
    """The server time of the newest message the user has seen."""

    model_config = ConfigDict(frozen=True, strict=True)

    @classmethod
    def latest(cls, messages: Sequence[Message]) -> ReadMarker | None:
        """Marker for the newest message that can anchor the read position.

        Status lines are skipped. Logs live in their own buffer, so log
        entries count, which gives the logs view backlog support.
        """
        for message in reversed(messages):
            match message.source:
                case InternalStatus():
                    continue
                case _:
                    return cls(message.server_time)
        return None

    @classmethod
    def parse(cls, value: str) -> ReadMarker:
        """Parse RFC3339 text.

        Raises:
            ValueError: If the text is not a valid RFC3339 timestamp.
        """
        return cls(parse_rfc3339(value))

    @property
    def date_time(self) -> datetime:
        return self.root

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ReadMarker):
            return NotImplemented
        return self.root < other.root

    def __str__(self) -> str:
        return format_millis(self.root)


@total_ordering
class MessageReferences(BaseModel):
    """Where to resume a CHATHISTORY query from.

    Equality, hashing and ordering only look at ``timestamp``; ``id`` is
    carried along but two references at the same instant compare equal.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    timestamp: UtcDateTime
    id: str | None = None

    def message_reference(
        self,
        message_reference_types: Iterable[MessageReferenceType],
    ) -> MessageReference:
        """Pick the first reference kind in the server's preference order
        that this reference can satisfy."""
        for message_reference_type in message_reference_types:
            match message_reference_type:
                case MessageReferenceType.MESSAGE_ID:
                    if self.id is not None:
                        return MessageIdReference(self.id)
                case MessageReferenceType.TIMESTAMP:
                    return TimestampReference(self.timestamp)

        return NoReference()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MessageReferences):
            return NotImplemented
        return self.timestamp == other.timestamp

    def __hash__(self) -> int:
        return hash(self.timestamp)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, MessageReferences):
            return NotImplemented
        return self.timestamp < other.timestamp


class Metadata(BaseModel):
    """Bookkeeping stored for one conversation scope."""

    model_config = ConfigDict(strict=True)

    read_marker: ReadMarker | None = None
    last_triggers_unread: MillisDateTime | None = None
    chathistory_references: MessageReferences | None = None


class LoadOutcome(StrEnum):
    """How a load arrived at its result. Never surfaced by load()."""

    LOADED = "loaded"
    MISSING = "missing"
    UNREADABLE = "unreadable"
    CORRUPT = "corrupt"


def latest_triggers_unread(messages: Sequence[Message]) -> datetime | None:
    """Server time of the newest message that marks the buffer unread."""
    return next(
        (m.server_time for m in reversed(messages) if m.triggers_unread()),
        None,
    )


def latest_can_reference(messages: Sequence[Message]) -> MessageReferences | None:
    """References of the newest message usable to resume history."""
    return next(
        (m.references() for m in reversed(messages) if m.can_reference()),
        None,
    )


def composite_name(kind: Kind) -> str:
    """Build the un-hashed key a scope's metadata file is named from."""
    match kind:
        case Server(server=server):
            return f"{server}-metadata"
        case Channel(server=server, channel=channel):
            return f"{server}channel{channel}-metadata"
        case Query(server=server, nick=nick):
            return f"{server}nickname{nick}-metadata"
        case Logs():
            return "logs-metadata"
        case Highlights():
            return "highlights-metadata"
    raise TypeError(f"Unknown history kind: {kind!r}")


def hash_name(name: str) -> int:
    """64-bit unsigned SeaHash of a composite name."""
    return seahash.hash(name.encode("utf-8"))


def file_name(kind: Kind) -> str:
    """File name of a scope's metadata, e.g. ``1234567890123456789.json``."""
    return f"{hash_name(composite_name(kind))}{METADATA_SUFFIX}"


def _encode(metadata: Metadata) -> bytes:
    try:
        return metadata.model_dump_json(exclude_none=True).encode("utf-8")
    except (PydanticSerializationError, ValueError) as e:
        raise SerializationError(f"Failed to encode metadata: {e}") from e


async def _write_atomic(path: Path, data: bytes) -> None:
    """Write to a temp file in the same directory, then rename over path."""
    temp_fd, temp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=f".{path.stem}_",
        suffix=".tmp",
    )

    try:
        async with aiofiles.open(temp_fd, "wb") as f:
            await f.write(data)

        await aiofiles.os.replace(temp_path, path)
    except BaseException:
        # Clean up temp file on error or cancellation
        try:
            Path(temp_path).unlink()
        except OSError:
            pass
        raise


class MetadataStore:
    """File-backed metadata storage, one JSON file per scope.

    Every call round-trips through the filesystem; nothing is cached.
    Writes to a metadata file are serialized with a lock per file and per
    event loop so that the read-compare-write in update() cannot lose a
    newer marker.
    """

    def __init__(
        self,
        base_path: Path | None = None,
        *,
        atomic_writes: bool = True,
    ) -> None:
        """Initialize metadata store.

        Args:
            base_path: History directory. Defaults to ~/.chatmeta/history,
                resolved on every call.
            atomic_writes: Write through a temp file and rename. When False
                the file is overwritten in place.
        """
        self._base_path = base_path
        self._atomic_writes = atomic_writes
        self._locks: weakref.WeakKeyDictionary[
            asyncio.AbstractEventLoop, dict[str, tuple[asyncio.Lock, int]]
        ] = weakref.WeakKeyDictionary()

    @classmethod
    def from_config(cls, config: ChatmetaConfig) -> MetadataStore:
        return cls(config.history_dir, atomic_writes=config.atomic_writes)

    async def dir_path(self) -> Path:
        """Resolve the history directory, creating it if needed.

        Raises:
            DirectoryError: If the directory cannot be created.
        """
        path = self._base_path or get_history_path()
        try:
            await aiofiles.os.makedirs(path, exist_ok=True)
        except OSError as e:
            raise DirectoryError(f"Cannot create history directory {path}: {e}") from e
        return path

    async def path(self, kind: Kind) -> Path:
        """Path of the metadata file for a scope."""
        return (await self.dir_path()) / file_name(kind)

    async def load(self, kind: Kind) -> Metadata:
        """Load a scope's metadata.

        Missing, unreadable and undecodable files all yield an empty
        Metadata.

        Raises:
            DirectoryError: If the history directory is unavailable.
        """
        metadata, _ = await self.load_with_outcome(kind)
        return metadata

    async def load_with_outcome(self, kind: Kind) -> tuple[Metadata, LoadOutcome]:
        """Load a scope's metadata along with how it was obtained."""
        path = await self.path(kind)
        log_extra = {"history.kind": str(kind), "file.name": path.name}

        try:
            async with aiofiles.open(path, "rb") as f:
                data = await f.read()
        except FileNotFoundError:
            logger.debug("metadata_missing", extra=log_extra)
            return Metadata(), LoadOutcome.MISSING
        except OSError as e:
            logger.warning(
                "metadata_unreadable", extra={**log_extra, "error.message": str(e)}
            )
            return Metadata(), LoadOutcome.UNREADABLE

        try:
            return Metadata.model_validate_json(data), LoadOutcome.LOADED
        except ValidationError as e:
            logger.warning(
                "metadata_corrupt", extra={**log_extra, "error_count": e.error_count()}
            )
            return Metadata(), LoadOutcome.CORRUPT

    async def save(
        self,
        kind: Kind,
        messages: Sequence[Message],
        read_marker: ReadMarker | None,
    ) -> None:
        """Overwrite a scope's metadata, deriving the unread time and
        history reference from its messages.

        Raises:
            DirectoryError: If the history directory is unavailable.
            SerializationError: If the record cannot be encoded.
            StorageIOError: If the file cannot be written.
        """
        metadata = Metadata(
            read_marker=read_marker,
            last_triggers_unread=latest_triggers_unread(messages),
            chathistory_references=latest_can_reference(messages),
        )

        async with self._locked(kind):
            await self._write(kind, metadata)

    async def update(self, kind: Kind, read_marker: ReadMarker) -> bool:
        """Advance a scope's read marker, keeping its other fields.

        A marker at or before the stored one is ignored.

        Returns:
            True if the file was written, False if the stored marker was
            already at or past ``read_marker``.

        Raises:
            DirectoryError: If the history directory is unavailable.
            SerializationError: If the record cannot be encoded.
            StorageIOError: If the file cannot be written.
        """
        async with self._locked(kind):
            metadata = await self.load(kind)

            if metadata.read_marker is not None and metadata.read_marker >= read_marker:
                logger.debug(
                    "read_marker_not_advanced",
                    extra={
                        "history.kind": str(kind),
                        "read_marker.stored": str(metadata.read_marker),
                        "read_marker.candidate": str(read_marker),
                    },
                )
                return False

            await self._write(
                kind,
                Metadata(
                    read_marker=read_marker,
                    last_triggers_unread=metadata.last_triggers_unread,
                    chathistory_references=metadata.chathistory_references,
                ),
            )
            return True

    @asynccontextmanager
    async def _locked(self, kind: Kind) -> AsyncIterator[None]:
        """Hold the lock for a scope's file in the running event loop.

        Locks are keyed by file name, so colliding scopes share one. An
        entry is dropped once its last user leaves.
        """
        locks = self._locks.setdefault(asyncio.get_running_loop(), {})
        name = file_name(kind)
        lock, users = locks.get(name, (asyncio.Lock(), 0))
        locks[name] = (lock, users + 1)

        try:
            async with lock:
                yield
        finally:
            lock, users = locks[name]
            if users == 1:
                del locks[name]
            else:
                locks[name] = (lock, users - 1)

    async def _write(self, kind: Kind, metadata: Metadata) -> None:
        data = _encode(metadata)
        path = await self.path(kind)

        try:
            if self._atomic_writes:
                await _write_atomic(path, data)
            else:
                async with aiofiles.open(path, "wb") as f:
                    await f.write(data)
        except OSError as e:
            raise StorageIOError(f"Failed to write {path}: {e}") from e


_default_store: MetadataStore | None = None


def get_default_store() -> MetadataStore:
    """Get the process-wide store backing the module-level functions."""
    global _default_store
    if _default_store is None:
        _default_store = MetadataStore()
    return _default_store


def set_default_store(store: MetadataStore | None) -> None:
    """Replace the process-wide store (None resets to the default)."""
    global _default_store
    _default_store = store


async def load(kind: Kind) -> Metadata:
    return await get_default_store().load(kind)


async def save(
    kind: Kind,
    messages: Sequence[Message],
    read_marker: ReadMarker | None,
) -> None:
    await get_default_store().save(kind, messages, read_marker)


async def update(kind: Kind, read_marker: ReadMarker) -> bool:
    return await get_default_store().update(kind, read_marker)
