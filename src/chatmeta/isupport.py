"""Message reference types negotiated through ISUPPORT.

Servers advertise which reference kinds they accept for CHATHISTORY
requests in the ``MSGREFTYPES`` token, in order of preference.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from chatmeta.timestamps import format_millis

logger = logging.getLogger(__name__)


class MessageReferenceType(StrEnum):
    """A kind of reference a server accepts in CHATHISTORY."""

    MESSAGE_ID = "msgid"
    TIMESTAMP = "timestamp"


@dataclass(frozen=True)
class MessageIdReference:
    id: str

    def to_param(self) -> str:
        return f"msgid={self.id}"


@dataclass(frozen=True)
class TimestampReference:
    timestamp: datetime

    def to_param(self) -> str:
        return f"timestamp={format_millis(self.timestamp)}"


@dataclass(frozen=True)
class NoReference:
    """No usable reference; CHATHISTORY takes ``*`` in its place."""

    def to_param(self) -> str:
        return "*"


MessageReference = MessageIdReference | TimestampReference | NoReference


def parse_message_reference_types(value: str) -> list[MessageReferenceType]:
    """Parse a MSGREFTYPES token value, e.g. ``timestamp,msgid``.

    Order is preserved, duplicates are dropped and unknown types skipped.
    """
    types: list[MessageReferenceType] = []
    for raw in value.split(","):
        raw = raw.strip()
        if not raw:
            continue
        try:
            reference_type = MessageReferenceType(raw.lower())
        except ValueError:
            logger.debug("unknown_msgreftype", extra={"msgreftype": raw})
            continue
        if reference_type not in types:
            types.append(reference_type)
    return types
