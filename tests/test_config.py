"""Tests for YAML settings loading."""

import pytest

from lemma_markup import ConfigError, Settings, SourceNotFoundError, load_settings
from lemma_markup.config import settings_from_mapping


class TestLoadSettings:
    """Reading settings files."""

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(
            "placeholder: '-'\n"
            "merge: false\n"
            "fail_fast: true\n"
            "encoding: latin-1\n"
            "log_level: debug\n"
        )
        settings = load_settings(path)
        assert settings == Settings(
            placeholder="-",
            merge=False,
            fail_fast=True,
            encoding="latin-1",
            log_level="DEBUG",
        )

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("")
        assert load_settings(path) == Settings()

    def test_partial_file_keeps_defaults(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("merge: false\n")
        settings = load_settings(path)
        assert settings.merge is False
        assert settings.placeholder == "~"

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceNotFoundError):
            load_settings(tmp_path / "missing.yaml")

    def test_invalid_yaml_reports_line(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("merge: true\nplaceholder: [unclosed\n")
        with pytest.raises(ConfigError) as exc_info:
            load_settings(path)
        assert "Invalid YAML" in str(exc_info.value)
        assert exc_info.value.line is not None

    def test_root_must_be_mapping(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("- merge\n- fail_fast\n")
        with pytest.raises(ConfigError, match="must be a mapping"):
            load_settings(path)


class TestSettingsFromMapping:
    """Checks applied to parsed settings."""

    def test_unknown_key(self):
        with pytest.raises(ConfigError, match="Unknown setting"):
            settings_from_mapping({"merge": True, "colour": "red"})

    def test_wrong_type(self):
        with pytest.raises(ConfigError, match="'merge' must be a bool, got str"):
            settings_from_mapping({"merge": "yes"})

    def test_empty_placeholder(self):
        with pytest.raises(ConfigError, match="placeholder"):
            settings_from_mapping({"placeholder": ""})

    def test_bad_log_level(self):
        with pytest.raises(ConfigError, match="log_level"):
            settings_from_mapping({"log_level": "LOUD"})

    def test_unknown_encoding(self):
        with pytest.raises(ConfigError, match="Unknown encoding"):
            settings_from_mapping({"encoding": "no-such-codec"})
