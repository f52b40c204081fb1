"""Tests for settings assembly from config file, environment and CLI."""

import argparse
import logging
import os

import pytest

from cli_config import Settings, build_settings, load_config_file
from common.errors import ConfigError
from constants import Constants


def _args(**kwargs):
    defaults = {"CONFIG": None, "CACHE_DIR": None, "GZIP_LEVEL": None, "MINIFIER_ARGS": []}
    defaults.update(kwargs)
    return argparse.Namespace(**defaults)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv(Constants.ENV_CONFIG, raising=False)
    monkeypatch.delenv(Constants.ENV_CACHE_DIR, raising=False)


class TestLoadConfigFile:
    """Tests for load_config_file()."""

    def test_no_path(self):
        assert load_config_file(None) == {}

    def test_missing_file_warns(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            assert load_config_file(str(tmp_path / "absent.yml")) == {}
        assert "not found" in caplog.text

    def test_section_is_honored(self, tmp_path):
        cfg = tmp_path / "cfg.yml"
        cfg.write_text("bundlecost:\n  gzip_level: 9\nother: 1\n", encoding="utf-8")
        assert load_config_file(str(cfg)) == {"gzip_level": 9}

    def test_flat_mapping(self, tmp_path):
        cfg = tmp_path / "cfg.yml"
        cfg.write_text("chunk_size: 1024\n", encoding="utf-8")
        assert load_config_file(str(cfg)) == {"chunk_size": 1024}

    def test_malformed_raises(self, tmp_path):
        cfg = tmp_path / "cfg.yml"
        cfg.write_text("key: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config_file(str(cfg))

    def test_non_mapping_raises(self, tmp_path):
        cfg = tmp_path / "cfg.yml"
        cfg.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config_file(str(cfg))


class TestBuildSettings:
    """Tests for build_settings() precedence."""

    def test_defaults(self):
        settings = build_settings(_args())
        assert settings == Settings()
        assert settings.env == {"NODE_ENV": "production"}
        assert settings.cache_dir.endswith(".cached_modules")

    def test_config_file_values(self, tmp_path):
        cfg = tmp_path / "cfg.yml"
        cfg.write_text(
            "bundlecost:\n"
            "  bundler_command: npx --no-install browserify\n"
            "  minifier_command: [npx, terser]\n"
            "  minifier_args: -c -m\n",
            encoding="utf-8",
        )
        settings = build_settings(_args(CONFIG=str(cfg)))
        assert settings.bundler_command == ["npx", "--no-install", "browserify"]
        assert settings.minifier_command == ["npx", "terser"]
        assert settings.minifier_args == ["-c", "-m"]

    def test_config_from_environment(self, tmp_path, monkeypatch):
        cfg = tmp_path / "cfg.yml"
        cfg.write_text("gzip_level: 4\n", encoding="utf-8")
        monkeypatch.setenv(Constants.ENV_CONFIG, str(cfg))
        assert build_settings(_args()).gzip_level == 4

    def test_cli_beats_env_beats_file(self, tmp_path, monkeypatch):
        cfg = tmp_path / "cfg.yml"
        cfg.write_text(f"cache_dir: {tmp_path / 'file'}\ngzip_level: 1\n", encoding="utf-8")
        monkeypatch.setenv(Constants.ENV_CACHE_DIR, str(tmp_path / "env"))

        settings = build_settings(_args(CONFIG=str(cfg)))
        assert settings.cache_dir == str(tmp_path / "env")
        assert settings.gzip_level == 1

        settings = build_settings(_args(CONFIG=str(cfg), CACHE_DIR=str(tmp_path / "cli"),
                                        GZIP_LEVEL=0, MINIFIER_ARGS=["-b"]))
        assert settings.cache_dir == str(tmp_path / "cli")
        assert settings.gzip_level == 0
        assert settings.minifier_args == ["-b"]

    def test_cache_dir_made_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        settings = build_settings(_args(CACHE_DIR="rel-cache"))
        assert settings.cache_dir == os.path.join(os.getcwd(), "rel-cache")

    def test_unknown_key_ignored(self, caplog):
        settings = Settings()
        with caplog.at_level(logging.WARNING):
            settings.apply({"colour": "blue"})
        assert "Ignoring unknown config key: colour" in caplog.text

    def test_invalid_values_raise(self):
        with pytest.raises(ConfigError):
            Settings().apply({"gzip_level": 42})
        with pytest.raises(ConfigError):
            Settings().apply({"chunk_size": "big"})
        with pytest.raises(ConfigError):
            Settings().apply({"chunk_size": 0})
