"""Shared test fixtures and factories."""

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from chatmeta.config.paths import ENV_VAR, get_chatmeta_home
from chatmeta.history.message import Source, User
from chatmeta.history.metadata import MessageReferences, MetadataStore

BASE_TIME = datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)

# =============================================================================
# Message Fixtures
# =============================================================================


@dataclass
class FakeMessage:
    """Minimal message satisfying the history Message protocol."""

    server_time: datetime
    source: Source = field(default_factory=lambda: User("alice"))
    unread: bool = True
    referenceable: bool = True
    id: str | None = None

    def triggers_unread(self) -> bool:
        return self.unread

    def can_reference(self) -> bool:
        return self.referenceable

    def references(self) -> MessageReferences:
        return MessageReferences(timestamp=self.server_time, id=self.id)


MessageFactory = Callable[..., FakeMessage]


@pytest.fixture
def make_message() -> MessageFactory:
    """Factory for messages at ``BASE_TIME + seconds``."""

    def _make_message(seconds: float = 0, **kwargs) -> FakeMessage:
        return FakeMessage(
            server_time=BASE_TIME + timedelta(seconds=seconds),
            **kwargs,
        )

    return _make_message


@pytest.fixture
def at() -> Callable[[float], datetime]:
    """Datetime at ``BASE_TIME + seconds``."""

    def _at(seconds: float) -> datetime:
        return BASE_TIME + timedelta(seconds=seconds)

    return _at


# =============================================================================
# Storage Fixtures
# =============================================================================


@pytest.fixture
def history_dir(tmp_path: Path) -> Path:
    """History directory under a temporary path (not created up front)."""
    return tmp_path / "history"


@pytest.fixture
def store(history_dir: Path) -> MetadataStore:
    """Create a MetadataStore writing to a temporary directory."""
    return MetadataStore(history_dir)


@pytest.fixture
def chatmeta_home(tmp_path: Path, monkeypatch) -> Iterator[Path]:
    """Point CHATMETA_HOME at a temporary directory."""
    home = tmp_path / ".chatmeta"
    monkeypatch.setenv(ENV_VAR, str(home))
    get_chatmeta_home.cache_clear()
    yield home
    get_chatmeta_home.cache_clear()


# =============================================================================
# CLI Test Helpers
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner with colors disabled."""
    from typer.testing import CliRunner

    return CliRunner(env={"NO_COLOR": "1", "COLUMNS": "200"})
