"""Tests for shared common modules: config, credential, exceptions, logging."""

import logging
import os
import stat
import sys
from datetime import timedelta
from pathlib import Path

import pytest

from src.common.config import (
    MIN_REQUEST_INTERVAL,
    PROJECT_ROOT,
    Settings,
    ThrottlePolicy,
    load_config,
    read_session_token,
    save_session_token,
)
from src.common.exceptions import (
    AocError,
    AuthError,
    ConfigError,
    FetchError,
    MissingCredential,
    ThrottledError,
    UnreadableConfig,
)
from src.common.logging import setup_logging


class TestSettings:
    def test_defaults(self, tmp_path: Path):
        settings = Settings.load(tmp_path / "missing.yaml")
        assert settings.throttle_policy == ThrottlePolicy.BLOCK
        assert settings.base_url == "https://adventofcode.com"
        assert settings.session_file == tmp_path / "xdg" / "aoc" / "session"
        assert "github.com" in settings.user_agent

    def test_interval_is_five_minutes(self):
        assert MIN_REQUEST_INTERVAL == timedelta(minutes=5)
        assert "interval" not in Settings.model_fields

    def test_derived_paths(self, settings: Settings):
        assert settings.input_dir == settings.data_dir / "inputs"
        assert settings.throttle_file == settings.data_dir / "throttle" / "last_request"

    def test_relative_data_dir_resolves_to_project_root(self):
        settings = Settings(data_dir="data/custom")
        assert settings.data_dir == PROJECT_ROOT / "data" / "custom"

    def test_load_from_yaml(self, tmp_path: Path):
        path = tmp_path / "settings.yaml"
        path.write_text(
            f"data_dir: {tmp_path / 'store'}\n"
            "throttle_policy: fail\n"
            "base_url: https://example.test/\n"
            "request_timeout: 5\n",
            encoding="utf-8",
        )
        settings = Settings.load(path)
        assert settings.data_dir == tmp_path / "store"
        assert settings.throttle_policy == ThrottlePolicy.FAIL
        assert settings.base_url == "https://example.test"
        assert settings.request_timeout == 5.0

    def test_env_overrides_yaml(self, tmp_path: Path, monkeypatch):
        path = tmp_path / "settings.yaml"
        path.write_text("throttle_policy: fail\n", encoding="utf-8")
        monkeypatch.setenv("AOC_THROTTLE_POLICY", "BLOCK")
        monkeypatch.setenv("AOC_DATA_DIR", str(tmp_path / "env-data"))
        monkeypatch.setenv("AOC_REQUEST_TIMEOUT", "12.5")

        settings = Settings.load(path)
        assert settings.throttle_policy == ThrottlePolicy.BLOCK
        assert settings.data_dir == tmp_path / "env-data"
        assert settings.request_timeout == 12.5

    def test_settings_path_from_env(self, tmp_path: Path, monkeypatch):
        path = tmp_path / "alt.yaml"
        path.write_text("throttle_policy: fail\n", encoding="utf-8")
        monkeypatch.setenv("AOC_SETTINGS", str(path))
        assert Settings.load().throttle_policy == ThrottlePolicy.FAIL

    def test_invalid_yaml_is_unreadable(self, tmp_path: Path):
        path = tmp_path / "settings.yaml"
        path.write_text("data_dir: [unterminated\n", encoding="utf-8")
        with pytest.raises(UnreadableConfig) as exc_info:
            Settings.load(path)
        assert exc_info.value.path == path

    def test_non_mapping_yaml_is_unreadable(self, tmp_path: Path):
        path = tmp_path / "settings.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(UnreadableConfig):
            Settings.load(path)

    def test_invalid_policy_is_unreadable(self, tmp_path: Path):
        path = tmp_path / "settings.yaml"
        path.write_text("throttle_policy: sometimes\n", encoding="utf-8")
        with pytest.raises(UnreadableConfig):
            Settings.load(path)

    def test_blank_user_agent_rejected(self, tmp_path: Path):
        path = tmp_path / "settings.yaml"
        path.write_text("user_agent: '   '\n", encoding="utf-8")
        with pytest.raises(UnreadableConfig):
            Settings.load(path)


class TestSessionToken:
    def test_env_takes_precedence(self, settings: Settings, monkeypatch):
        save_session_token("from-file", settings)
        monkeypatch.setenv("AOC_SESSION", "  from-env  ")
        assert read_session_token(settings) == "from-env"

    def test_read_from_file(self, settings: Settings, session_token: str):
        settings.session_file.parent.mkdir(parents=True)
        settings.session_file.write_text(f"{session_token}\n", encoding="utf-8")
        assert read_session_token(settings) == session_token

    def test_missing(self, settings: Settings):
        with pytest.raises(MissingCredential, match="aoc login"):
            read_session_token(settings)

    def test_empty_env_falls_back_to_missing(self, settings: Settings, monkeypatch):
        monkeypatch.setenv("AOC_SESSION", "")
        with pytest.raises(MissingCredential):
            read_session_token(settings)

    def test_empty_file(self, settings: Settings):
        settings.session_file.parent.mkdir(parents=True)
        settings.session_file.write_text("\n", encoding="utf-8")
        with pytest.raises(MissingCredential, match="empty"):
            read_session_token(settings)

    def test_unreadable_file(self, settings: Settings):
        # A directory exists at the location but cannot be read as text
        settings.session_file.mkdir(parents=True)
        with pytest.raises(UnreadableConfig) as exc_info:
            read_session_token(settings)
        assert exc_info.value.path == settings.session_file

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_save_restricts_permissions(self, settings: Settings, session_token: str):
        path = save_session_token(f"  {session_token}\n", settings)
        assert path.read_text(encoding="utf-8") == f"{session_token}\n"
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o600

    def test_save_rejects_empty(self, settings: Settings):
        with pytest.raises(ValueError):
            save_session_token("   ", settings)


class TestLoadConfig:
    def test_load_config(self, settings: Settings, session_token: str, monkeypatch):
        monkeypatch.setenv("AOC_SESSION", session_token)
        config = load_config(settings)
        assert config.settings is settings
        assert config.cookies == {"session": session_token}

    def test_token_never_rendered(self, settings: Settings, session_token: str, monkeypatch):
        monkeypatch.setenv("AOC_SESSION", session_token)
        config = load_config(settings)
        assert session_token not in repr(config)
        assert session_token not in str(config)
        assert session_token not in config.model_dump_json()

    def test_missing_credential(self, settings: Settings):
        with pytest.raises(MissingCredential):
            load_config(settings)


class TestExceptions:
    def test_hierarchy(self):
        assert issubclass(MissingCredential, ConfigError)
        assert issubclass(UnreadableConfig, ConfigError)
        assert issubclass(ThrottledError, FetchError)
        assert issubclass(AuthError, FetchError)
        assert issubclass(ConfigError, AocError)
        assert issubclass(FetchError, AocError)

    def test_throttled_error_carries_retry_after(self):
        exc = ThrottledError("slow down", retry_after=timedelta(seconds=90))
        assert exc.retry_after.total_seconds() == 90
        assert exc.key is None


class TestLogging:
    def test_setup_logging_is_idempotent(self):
        logger = setup_logging(logging.DEBUG, module_name="test_aoc_logging")
        again = setup_logging(logging.INFO, module_name="test_aoc_logging")
        assert logger is again
        assert len(logger.handlers) == 1
        assert logger.level == logging.INFO
