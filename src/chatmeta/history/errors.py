"""History storage errors.

Undecodable file content is deliberately absent: loading treats it as an
empty record instead of raising.
"""


class HistoryError(Exception):
    """Base error for history storage."""

    pass


class DirectoryError(HistoryError):
    """The history directory could not be resolved or created."""

    pass


class StorageIOError(HistoryError):
    """Reading or writing a history file failed."""

    pass


class SerializationError(HistoryError):
    """A record could not be encoded for writing."""

    pass
