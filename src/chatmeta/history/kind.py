"""Conversation scopes that history metadata is keyed on."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Server:
    """The server buffer of a connection."""

    server: str

    def __str__(self) -> str:
        return f"server:{self.server}"


@dataclass(frozen=True)
class Channel:
    """A channel on a server."""

    server: str
    channel: str

    def __str__(self) -> str:
        return f"channel:{self.server}:{self.channel}"


@dataclass(frozen=True)
class Query:
    """A private conversation with a nick on a server."""

    server: str
    nick: str

    def __str__(self) -> str:
        return f"query:{self.server}:{self.nick}"


@dataclass(frozen=True)
class Logs:
    """The client's own logs view."""

    def __str__(self) -> str:
        return "logs"


@dataclass(frozen=True)
class Highlights:
    """The aggregated highlights view."""

    def __str__(self) -> str:
        return "highlights"


Kind = Server | Channel | Query | Logs | Highlights


def parse_kind(value: str) -> Kind:
    """Parse a scope from its display form.

    Accepted forms are ``server:<id>``, ``channel:<server>:<channel>``,
    ``query:<server>:<nick>``, ``logs`` and ``highlights``. The last
    component keeps any further colons.

    Raises:
        ValueError: If the value is not a recognized scope.
    """
    prefix, _, rest = value.partition(":")

    match prefix.lower():
        case "logs" if not rest:
            return Logs()
        case "highlights" if not rest:
            return Highlights()
        case "server" if rest:
            return Server(rest)
        case "channel" | "query":
            server, sep, target = rest.partition(":")
            if not server or not sep or not target:
                raise ValueError(f"Expected {prefix}:<server>:<target>, got {value!r}")
            if prefix.lower() == "channel":
                return Channel(server, target)
            return Query(server, target)

    raise ValueError(f"Unknown scope: {value!r}")
