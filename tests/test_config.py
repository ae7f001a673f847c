"""Tests for configuration loading."""

from pathlib import Path

import pytest

from chatmeta.config import ChatmetaConfig, ConfigError, load_config
from chatmeta.history import MetadataStore, ReadMarker, Server


class TestChatmetaConfig:
    """Tests for ChatmetaConfig defaults."""

    def test_defaults(self, chatmeta_home: Path):
        config = ChatmetaConfig()

        assert config.history_dir == chatmeta_home / "history"
        assert config.atomic_writes is True
        assert config.log_level == "INFO"

    def test_rejects_unknown_log_level(self):
        with pytest.raises(ValueError):
            ChatmetaConfig(log_level="LOUD")


class TestLoadConfig:
    """Tests for load_config()."""

    @pytest.fixture(autouse=True)
    def isolated_cwd(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)

    def test_explicit_path(self, tmp_path: Path):
        config_path = tmp_path / "custom.toml"
        config_path.write_text(
            'history_dir = "/tmp/chatmeta-history"\n'
            "atomic_writes = false\n"
            'log_level = "DEBUG"\n'
        )

        config = load_config(config_path)

        assert config.history_dir == Path("/tmp/chatmeta-history")
        assert config.atomic_writes is False
        assert config.log_level == "DEBUG"

    def test_expands_tilde_in_history_dir(self, tmp_path: Path):
        config_path = tmp_path / "custom.toml"
        config_path.write_text('history_dir = "~/chat-history"\n')

        assert load_config(config_path).history_dir == Path.home() / "chat-history"

    def test_explicit_missing_path_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.toml")

    def test_no_config_anywhere_uses_defaults(self, chatmeta_home: Path):
        config = load_config()

        assert config == ChatmetaConfig()
        assert config.history_dir == chatmeta_home / "history"

    def test_finds_config_in_home(self, chatmeta_home: Path):
        chatmeta_home.mkdir(parents=True)
        (chatmeta_home / "config.toml").write_text('log_level = "WARNING"\n')

        assert load_config().log_level == "WARNING"

    def test_current_directory_wins(self, tmp_path: Path, chatmeta_home: Path):
        chatmeta_home.mkdir(parents=True)
        (chatmeta_home / "config.toml").write_text('log_level = "WARNING"\n')
        (tmp_path / "chatmeta.toml").write_text('log_level = "ERROR"\n')

        assert load_config().log_level == "ERROR"

    def test_invalid_toml_raises_config_error(self, tmp_path: Path):
        config_path = tmp_path / "invalid.toml"
        config_path.write_text("not valid toml [[[")

        with pytest.raises(ConfigError):
            load_config(config_path)

    def test_invalid_values_raise_config_error(self, tmp_path: Path):
        config_path = tmp_path / "bad.toml"
        config_path.write_text('atomic_writes = "sometimes"\n')

        with pytest.raises(ConfigError):
            load_config(config_path)


class TestStoreFromConfig:
    """Tests for MetadataStore.from_config()."""

    async def test_uses_configured_history_dir(self, tmp_path: Path):
        history_dir = tmp_path / "elsewhere"
        store = MetadataStore.from_config(
            ChatmetaConfig(history_dir=history_dir, atomic_writes=False)
        )

        await store.update(Server("libera"), ReadMarker.parse("2024-05-01T12:00:00Z"))

        assert (await store.path(Server("libera"))).parent == history_dir
        assert len(list(history_dir.iterdir())) == 1
