"""
Configuration loading for tasksheet.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validate

from tasksheet.exceptions import InvalidConfigError, NotFoundError

logger = logging.getLogger(__name__)

PACKAGE_ROOT = Path(__file__).parent
CONFIG_FILENAME = "tasksheet.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "sheet": {
        "default_title": "Task Sequence",
        "worksheet_name": "Task Sequence",
        "timestamp_format": "%x %X",
        "include_continue_on_error": True,
    },
    "colors": {
        "group": "DDEBF7",
        "group_disabled": "D9D9D9",
        "step": "FFFFFF",
        "step_disabled": "F2F2F2",
        "disabled_font": "808080",
        "border": "A6A6A6",
    },
    "layout": {
        "max_text_width": 60,
        "max_settings_width": 80,
        "max_row_height": 120,
        "line_height": 15,
        "min_column_width": 8,
    },
    "engine": {
        "backend": "openpyxl",
        "macro_template": None,
    },
}


def default_config() -> dict[str, Any]:
    """Return a fresh copy of the built-in configuration."""
    return copy.deepcopy(DEFAULT_CONFIG)


def load_config(config_file: str | Path | None = None, search_dir: Path | None = None) -> dict[str, Any]:
    """
    Load configuration, merged over the defaults and validated.

    Args:
        config_file: Explicit config path (must exist)
        search_dir: Directory searched for tasksheet.yaml when no path is given

    Returns:
        Complete configuration dict

    Raises:
        NotFoundError: If an explicit config file is missing
        InvalidConfigError: If the file is not valid YAML or fails schema validation
    """
    if config_file is not None:
        path = Path(config_file)
        if not path.is_file():
            raise NotFoundError(str(path))
    else:
        path = Path(search_dir or Path.cwd()) / CONFIG_FILENAME
        if not path.is_file():
            logger.debug(f"No {CONFIG_FILENAME} found in {path.parent}, using defaults")
            return default_config()

    try:
        with open(path) as f:
            user_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InvalidConfigError(f"{path}: {e}") from e

    if user_config is None:
        logger.warning(f"Config file is empty: {path}")
        return default_config()

    if not isinstance(user_config, dict):
        raise InvalidConfigError(f"expected a mapping, got {type(user_config).__name__}")

    config = merge_config(default_config(), user_config)
    validate_config(config)
    logger.info(f"Loaded configuration from {path}")
    return config


def merge_config(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base (base is modified and returned)."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            merge_config(base[key], value)
        else:
            base[key] = value
    return base


def validate_config(config: dict[str, Any]) -> None:
    """Validate config against the packaged JSON schema."""
    schema_file = PACKAGE_ROOT / "schema" / "config.schema.json"
    schema = json.loads(schema_file.read_text())
    try:
        validate(instance=config, schema=schema)
    except ValidationError as e:
        location = ".".join(str(p) for p in e.path) or "<root>"
        raise InvalidConfigError(f"{e.message} (at {location})") from e


def write_default_config(path: Path) -> None:
    """Write the default configuration as YAML."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(DEFAULT_CONFIG, f, default_flow_style=False, sort_keys=False)
