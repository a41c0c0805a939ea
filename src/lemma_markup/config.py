"""
YAML settings for the lemma-markup command-line tool.

Example ``lemma-markup.yaml``::

    placeholder: "~"
    merge: true
    fail_fast: false
    encoding: utf-8
    log_level: INFO
"""
from __future__ import annotations

import codecs
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from lemma_markup.exceptions import ConfigError, SourceIOError, SourceNotFoundError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Settings:
    """Options the CLI reads from a settings file."""
    placeholder: str = "~"
    merge: bool = True
    fail_fast: bool = False
    encoding: str = "utf-8"
    log_level: str = "WARNING"


_FIELD_TYPES: Dict[str, type] = {f.name: type(f.default) for f in fields(Settings)}


def load_settings(path: Union[str, Path]) -> Settings:
    """Load settings from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Settings with defaults for every key the file omits

    Raises:
        ConfigError: If the file is not valid YAML or holds invalid settings
        SourceNotFoundError: If the file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise SourceNotFoundError(f"File not found: {path}", str(path))
    return settings_from_mapping(_load_yaml_file(path))


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load YAML from a file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        line_num = mark.line + 1 if mark else None
        raise ConfigError(f"Invalid YAML: {e}", line=line_num) from e
    except OSError as e:
        raise SourceIOError(f"Error reading file {path}: {e}", str(path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("YAML root must be a mapping (dictionary)")
    return data


def settings_from_mapping(data: Dict[str, Any]) -> Settings:
    """Build Settings from a parsed mapping, rejecting unknown keys."""
    unknown = sorted(str(key) for key in data if key not in _FIELD_TYPES)
    if unknown:
        raise ConfigError(f"Unknown setting(s): {', '.join(unknown)}")

    for key, value in data.items():
        expected = _FIELD_TYPES[key]
        if not isinstance(value, expected):
            raise ConfigError(
                f"Setting '{key}' must be a {expected.__name__}, got {type(value).__name__}"
            )

    settings = Settings(**data)

    if not settings.placeholder:
        raise ConfigError("Setting 'placeholder' cannot be empty")

    settings.log_level = settings.log_level.upper()
    if settings.log_level not in LOG_LEVELS:
        raise ConfigError(
            f"Setting 'log_level' must be one of: {', '.join(LOG_LEVELS)}"
        )

    try:
        codecs.lookup(settings.encoding)
    except LookupError as e:
        raise ConfigError(f"Unknown encoding: {settings.encoding}") from e

    return settings
