#!/usr/bin/env python3
"""
Unit tests for Rituals/config.py
"""

from pathlib import Path

from Rituals.config import (
    DEFAULT_CATALOG_PATH,
    DEFAULT_DB_PATH,
    DEFAULT_RECENT_LIMIT,
    RitualsConfig,
)
from Rituals.error_logger import LOG_FILE_NAME, log_error


class TestRitualsConfig:
    """Tests for environment-driven configuration."""

    def test_defaults(self, tmp_path, monkeypatch):
        config = RitualsConfig.from_env(env_path=tmp_path / "missing.env")

        assert config.db_path == DEFAULT_DB_PATH
        assert config.catalog_path == DEFAULT_CATALOG_PATH
        assert config.timezone is None
        assert config.tzinfo() is None
        assert config.recent_limit == DEFAULT_RECENT_LIMIT

    def test_environment_values(self, tmp_path, monkeypatch):
        monkeypatch.setenv("RITUALS_DB_PATH", str(tmp_path / "db.sqlite"))
        monkeypatch.setenv("RITUALS_CATALOG_PATH", str(tmp_path / "catalog.json"))
        monkeypatch.setenv("RITUALS_RECENT_LIMIT", "4")

        config = RitualsConfig.from_env(env_path=tmp_path / "missing.env")

        assert config.db_path == tmp_path / "db.sqlite"
        assert config.catalog_path == tmp_path / "catalog.json"
        assert config.recent_limit == 4

    def test_dotenv_file_is_loaded(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            f"RITUALS_DB_PATH={tmp_path / 'from_env.db'}\n"
            "RITUALS_RECENT_LIMIT=7\n"
        )

        config = RitualsConfig.from_env(env_path=env_file)

        assert config.db_path == tmp_path / "from_env.db"
        assert config.recent_limit == 7

    def test_environment_beats_dotenv(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("RITUALS_RECENT_LIMIT=7\n")
        monkeypatch.setenv("RITUALS_RECENT_LIMIT", "3")

        assert RitualsConfig.from_env(env_path=env_file).recent_limit == 3

    def test_invalid_recent_limit_falls_back(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("RITUALS_RECENT_LIMIT", "zero")

        config = RitualsConfig.from_env(env_path=tmp_path / "missing.env")

        assert config.recent_limit == DEFAULT_RECENT_LIMIT
        assert "RITUALS_RECENT_LIMIT" in capsys.readouterr().err

    def test_unknown_timezone_falls_back(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("RITUALS_TIMEZONE", "Mars/Olympus_Mons")

        config = RitualsConfig.from_env(env_path=tmp_path / "missing.env")

        assert config.timezone is None
        assert "Unknown timezone" in capsys.readouterr().err

    def test_valid_timezone(self, tmp_path, monkeypatch):
        monkeypatch.setenv("RITUALS_TIMEZONE", "UTC")

        config = RitualsConfig.from_env(env_path=tmp_path / "missing.env")

        assert config.timezone == "UTC"
        assert config.tzinfo().key == "UTC"

    def test_bundled_catalog_exists(self):
        assert Path(DEFAULT_CATALOG_PATH).exists()

    def test_dotenv_log_dir_reaches_error_logger(self, tmp_path, monkeypatch):
        monkeypatch.delenv("RITUALS_LOG_DIR")
        env_file = tmp_path / ".env"
        env_file.write_text(f"RITUALS_LOG_DIR={tmp_path / 'dotenv_logs'}\n")

        RitualsConfig.from_env(env_path=env_file)
        log_error("config_test", ValueError("boom"))

        assert (tmp_path / "dotenv_logs" / LOG_FILE_NAME).exists()
