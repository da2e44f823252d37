"""Tests for user configuration loading."""

import pytest

from cmdscan.config import CONFIG_ENV_VAR, ScanSettings, load_settings
from cmdscan.errors import InputError
from cmdscan.scanner.lexer import EscapeMode


@pytest.fixture(autouse=True)
def no_user_config(tmp_path, monkeypatch):
    monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "absent.yaml"))


class TestLoadSettings:
    def test_defaults_when_absent(self):
        settings = load_settings()
        assert settings == ScanSettings()
        assert settings.max_size == 50000
        assert settings.platform == "macos"
        assert settings.escape_mode is EscapeMode.LEGACY

    def test_explicit_missing_path(self, tmp_path):
        with pytest.raises(InputError, match="config file not found"):
            load_settings(tmp_path / "missing.yaml")

    def test_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "max_size: 100000\n"
            "platform: linux\n"
            "escape_mode: strict\n"
            "extra_names: [git, jq]\n"
        )
        settings = load_settings(path)
        assert settings.max_size == 100000
        assert settings.platform == "linux"
        assert settings.escape_mode is EscapeMode.STRICT
        assert settings.extra_names == ["git", "jq"]

    def test_env_var(self, tmp_path, monkeypatch):
        path = tmp_path / "env.yaml"
        path.write_text("platform: linux\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
        assert load_settings().platform == "linux"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_settings(path) == ScanSettings()

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- linux\n")
        with pytest.raises(InputError, match="mapping"):
            load_settings(path)

    def test_bad_bounds(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("min_size: 10\nmax_size: 5\n")
        with pytest.raises(InputError, match="invalid config"):
            load_settings(path)

    def test_bad_escape_mode(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("escape_mode: sloppy\n")
        with pytest.raises(InputError):
            load_settings(path)

    def test_relative_reference_sets(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("reference_sets: sets.yaml\n")
        assert load_settings(path).reference_sets == tmp_path / "sets.yaml"


class TestScanOptions:
    def test_carries_escape_mode(self):
        options = ScanSettings(escape_mode="strict").scan_options(line_window=(3, 9))
        assert options.escape_mode is EscapeMode.STRICT
        assert options.line_window == (3, 9)
