"""Tests for configuration management."""

from pathlib import Path

import pytest

from pageaudit import config


class TestLoadEnvFile:
    """Tests for load_env_file."""

    def test_load_env_file_missing_returns_empty(self, temp_dir: Path) -> None:
        env_path = temp_dir / ".env"
        assert not env_path.exists()
        assert config.load_env_file(env_path) == {}

    def test_load_env_file_ignores_comments_and_strips_quotes(self, temp_dir: Path) -> None:
        env_path = temp_dir / ".env"
        env_path.write_text("# comment\n\nFOO=\"bar\"\n  \nBAZ='qux'\n")
        assert config.load_env_file(env_path) == {"FOO": "bar", "BAZ": "qux"}


class TestLoadGlobalConfig:
    """Tests for load_global_config."""

    def test_missing_returns_empty(self) -> None:
        assert config.load_global_config() == {}

    def test_loads_yml(self) -> None:
        config_dir = Path.home() / ".pageaudit"
        config_dir.mkdir()
        (config_dir / "config.yml").write_text("PAGEAUDIT_TIMEOUT: 4\nPAGEAUDIT_VERIFY_SSL: false\n")

        assert config.load_global_config() == {"PAGEAUDIT_TIMEOUT": 4, "PAGEAUDIT_VERIFY_SSL": False}


class TestFindProjectDir:
    """Tests for find_project_dir."""

    def test_finds_marker_in_parent(self) -> None:
        root = Path.cwd()
        (root / ".pageaudit").mkdir()
        nested = root / "a" / "b"
        nested.mkdir(parents=True)

        assert config.find_project_dir(nested) == root.resolve()

    def test_global_config_dir_is_not_a_project(self) -> None:
        (Path.home() / ".pageaudit").mkdir()
        assert config.find_project_dir(Path.home()) is None


class TestGetters:
    """Tests for configuration priority and typed getters."""

    def test_defaults(self) -> None:
        assert config.get_request_timeout() == 15.0
        assert config.get_collect_timeout() == 5.0
        assert config.get_verify_ssl() is True
        assert config.get_fetch_subresources() is False
        assert config.get_user_agent() is None
        assert config.is_debug_config_enabled() is False

    def test_env_overrides_project_and_global(self, monkeypatch: pytest.MonkeyPatch) -> None:
        (Path.cwd() / ".pageaudit").mkdir()
        (Path.cwd() / ".pageaudit" / ".env").write_text("PAGEAUDIT_TIMEOUT=7\n")
        assert config.get_request_timeout() == 7.0

        monkeypatch.setenv("PAGEAUDIT_TIMEOUT", "2.5")
        assert config.get_request_timeout() == 2.5

    def test_global_config_values(self) -> None:
        config_dir = Path.home() / ".pageaudit"
        config_dir.mkdir()
        (config_dir / "config.yml").write_text(
            "PAGEAUDIT_VERIFY_SSL: false\nPAGEAUDIT_FETCH_SUBRESOURCES: yes\n"
        )

        assert config.get_verify_ssl() is False
        assert config.get_fetch_subresources() is True

    @pytest.mark.parametrize("value", ["1", "true", "YES", "on"])
    def test_boolean_parsing(self, monkeypatch: pytest.MonkeyPatch, value: str) -> None:
        monkeypatch.setenv("PAGEAUDIT_DEBUG", value)
        assert config.is_debug_config_enabled() is True

    def test_invalid_timeout_falls_back_to_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PAGEAUDIT_TIMEOUT", "soon")
        assert config.get_request_timeout() == 15.0
        monkeypatch.setenv("PAGEAUDIT_TIMEOUT", "-3")
        assert config.get_request_timeout() == 15.0
