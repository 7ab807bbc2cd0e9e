"""
Tests for configuration loading and validation.
"""

import pytest
import yaml

from tasksheet.config import (
    CONFIG_FILENAME,
    DEFAULT_CONFIG,
    default_config,
    load_config,
    merge_config,
    validate_config,
    write_default_config,
)
from tasksheet.exceptions import ConfigurationError, InvalidConfigError, NotFoundError


class TestLoadConfig:
    """Tests for locating and merging configuration files."""

    def test_defaults_without_file(self, tmp_path):
        assert load_config(search_dir=tmp_path) == DEFAULT_CONFIG

    def test_defaults_are_copied(self, tmp_path):
        config = load_config(search_dir=tmp_path)
        config["colors"]["group"] = "000000"

        assert DEFAULT_CONFIG["colors"]["group"] == "DDEBF7"

    def test_file_in_search_dir(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text("sheet:\n  worksheet_name: Steps\n")

        config = load_config(search_dir=tmp_path)

        assert config["sheet"]["worksheet_name"] == "Steps"
        assert config["sheet"]["default_title"] == "Task Sequence"
        assert config["colors"] == DEFAULT_CONFIG["colors"]

    def test_explicit_file(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("engine:\n  backend: memory\nlayout:\n  max_text_width: 40\n")

        config = load_config(path)

        assert config["engine"]["backend"] == "memory"
        assert config["layout"]["max_text_width"] == 40
        assert config["layout"]["line_height"] == 15

    def test_explicit_missing_file(self, tmp_path):
        with pytest.raises(NotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_empty_file(self, tmp_path, caplog):
        path = tmp_path / CONFIG_FILENAME
        path.write_text("")

        assert load_config(path) == DEFAULT_CONFIG
        assert "empty" in caplog.text

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / CONFIG_FILENAME
        path.write_text("sheet: [unclosed\n")

        with pytest.raises(InvalidConfigError):
            load_config(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / CONFIG_FILENAME
        path.write_text("- a\n- b\n")

        with pytest.raises(InvalidConfigError, match="mapping"):
            load_config(path)

    def test_schema_violation(self, tmp_path):
        path = tmp_path / CONFIG_FILENAME
        path.write_text("colors:\n  group: blue\n")

        with pytest.raises(InvalidConfigError, match="colors.group"):
            load_config(path)

    def test_unknown_key(self, tmp_path):
        path = tmp_path / CONFIG_FILENAME
        path.write_text("sheet:\n  theme: dark\n")

        with pytest.raises(InvalidConfigError):
            load_config(path)

    def test_invalid_config_is_configuration_error(self, tmp_path):
        path = tmp_path / CONFIG_FILENAME
        path.write_text("engine:\n  backend: excel\n")

        with pytest.raises(ConfigurationError):
            load_config(path)


class TestValidateConfig:
    """Tests for schema validation."""

    def test_defaults_are_valid(self):
        validate_config(default_config())

    def test_macro_template_path(self):
        config = default_config()
        config["engine"]["macro_template"] = "template.xlsm"
        validate_config(config)

    def test_non_positive_width(self):
        config = default_config()
        config["layout"]["max_text_width"] = 0

        with pytest.raises(InvalidConfigError, match="layout.max_text_width"):
            validate_config(config)


class TestMergeConfig:
    """Tests for deep merging."""

    def test_nested_merge(self):
        merged = merge_config({"a": {"b": 1, "c": 2}}, {"a": {"c": 3}, "d": 4})
        assert merged == {"a": {"b": 1, "c": 3}, "d": 4}

    def test_scalar_replaces_mapping(self):
        assert merge_config({"a": {"b": 1}}, {"a": None}) == {"a": None}


class TestWriteDefaultConfig:
    """Tests for writing the default file."""

    def test_round_trips_through_load(self, tmp_path):
        path = tmp_path / "conf" / CONFIG_FILENAME
        write_default_config(path)

        assert yaml.safe_load(path.read_text()) == DEFAULT_CONFIG
        assert load_config(path) == DEFAULT_CONFIG
