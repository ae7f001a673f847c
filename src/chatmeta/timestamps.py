"""RFC3339 helpers shared by the on-disk format and CHATHISTORY params."""

from datetime import UTC, datetime


def to_utc(value: datetime) -> datetime:
    """Convert an aware datetime to UTC.

    Raises:
        ValueError: If the datetime is naive.
    """
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError("timestamp must carry a UTC offset")
    return value.astimezone(UTC)


def truncate_millis(value: datetime) -> datetime:
    """Convert to UTC and drop precision below one millisecond."""
    value = to_utc(value)
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def format_millis(value: datetime) -> str:
    """Format as RFC3339 with millisecond precision and a ``Z`` designator."""
    return to_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_rfc3339(value: datetime) -> str:
    """Format as RFC3339 keeping full precision, with a ``Z`` designator."""
    return to_utc(value).isoformat().replace("+00:00", "Z")


def parse_rfc3339(value: str) -> datetime:
    """Parse RFC3339 text into a UTC datetime.

    Raises:
        ValueError: If the text is malformed or has no offset.
    """
    text = value.strip()
    # fromisoformat accepts date-only and week forms that RFC3339 does not
    if len(text) < 20 or text[10] not in "Tt ":
        raise ValueError(f"Invalid RFC3339 timestamp: {value!r}")
    return to_utc(datetime.fromisoformat(text.replace("z", "Z")))
