"""
Tests for the config loader and models.
"""

from pathlib import Path

import pytest

from alistctl.core.config.loader import ConfigError, find_config_file, load_config
from alistctl.core.models.config import AlistctlConfig


class TestDefaults:
    def test_defaults_match_stock_release(self):
        config = AlistctlConfig()
        assert config.service_name == "alist-backup"
        assert config.default_install_path == Path("/opt/alist-backup")
        assert config.unit_path == Path("/etc/systemd/system/alist-backup.service")
        assert config.port == 5244
        assert config.download.max_retries == 3
        assert config.download.initial_backoff == 5
        assert set(config.download_urls) == {"amd64", "arm64"}
        assert config.download_urls["arm64"].endswith("alist-linux-arm64.tar.gz")


class TestFindConfigFile:
    def test_explicit_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ALISTCTL_CONFIG", "/elsewhere.yml")
        assert find_config_file(tmp_path / "c.yml") == (tmp_path / "c.yml", True)

    def test_env_var(self, monkeypatch):
        monkeypatch.setenv("ALISTCTL_CONFIG", "/srv/alistctl.yml")
        assert find_config_file() == (Path("/srv/alistctl.yml"), True)

    def test_nothing_found(self, tmp_path, monkeypatch):
        monkeypatch.delenv("ALISTCTL_CONFIG", raising=False)
        monkeypatch.setattr(
            "alistctl.core.config.loader.DEFAULT_CONFIG_FILE", tmp_path / "missing.yml"
        )
        assert find_config_file() == (None, False)


class TestLoadConfig:
    def test_partial_file_keeps_defaults(self, tmp_path):
        cfg = tmp_path / "config.yml"
        cfg.write_text("port: 6000\ndownload:\n  max_retries: 5\n")
        config = load_config(cfg)
        assert config.port == 6000
        assert config.download.max_retries == 5
        assert config.download.initial_backoff == 5
        assert config.service_name == "alist-backup"

    def test_empty_file(self, tmp_path):
        cfg = tmp_path / "config.yml"
        cfg.write_text("")
        assert load_config(cfg) == AlistctlConfig()

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.yml")

    def test_optional_default_file_missing(self, tmp_path, monkeypatch):
        monkeypatch.delenv("ALISTCTL_CONFIG", raising=False)
        monkeypatch.setattr(
            "alistctl.core.config.loader.DEFAULT_CONFIG_FILE", tmp_path / "missing.yml"
        )
        assert load_config() == AlistctlConfig()

    def test_invalid_yaml(self, tmp_path):
        cfg = tmp_path / "config.yml"
        cfg.write_text("port: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(cfg)

    def test_not_a_mapping(self, tmp_path):
        cfg = tmp_path / "config.yml"
        cfg.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(cfg)

    def test_invalid_values(self, tmp_path):
        cfg = tmp_path / "config.yml"
        cfg.write_text("port: 70000\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(cfg)
