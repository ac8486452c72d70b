"""
Reading and writing detector configuration files.

JSON, YAML and TOML are read by suffix; files with another suffix are tried
against each parser in turn. String values may reference the environment as
``${NAME}`` or ``${NAME:default}``, where ``HOLE_NAME`` takes precedence over
``NAME``.
"""

import json
import os
import re
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

import yaml
from pydantic import ValidationError

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from .models import Config
from ..exceptions import ConfigurationError

PathLike = Union[str, Path]

ENV_PREFIX = "HOLE_"
_ENV_REFERENCE = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")


def _parse_json(text: str) -> Dict[str, Any]:
    return json.loads(text)


def _parse_yaml(text: str) -> Dict[str, Any]:
    return yaml.safe_load(text) or {}


def _parse_toml(text: str) -> Dict[str, Any]:
    return tomllib.loads(text)


_PARSERS: Dict[str, Callable[[str], Dict[str, Any]]] = {
    ".json": _parse_json,
    ".yaml": _parse_yaml,
    ".yml": _parse_yaml,
    ".toml": _parse_toml,
}

_PARSE_ERRORS = (json.JSONDecodeError, yaml.YAMLError, tomllib.TOMLDecodeError)


def load_config(config_path: PathLike) -> Config:
    """
    Load and validate a configuration file.

    Args:
        config_path: Path to a JSON, YAML or TOML file

    Returns:
        Validated configuration object

    Raises:
        ConfigurationError: If the file is missing, cannot be parsed or
            does not validate
    """
    path = Path(config_path)
    if not path.is_file():
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file {path}: {e}")

    parser = _PARSERS.get(path.suffix.lower())
    try:
        data = parser(text) if parser else _parse_any(text)
    except _PARSE_ERRORS as e:
        raise ConfigurationError(f"Invalid configuration syntax in {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration in {path} must be a mapping",
                                 {"type": type(data).__name__})

    return load_config_from_dict(_substitute_env_vars(data))


def load_config_from_dict(config_data: Dict[str, Any]) -> Config:
    """
    Validate a configuration dictionary.

    Raises:
        ConfigurationError: With one ``section -> field: message`` line per
            validation error
    """
    try:
        return Config(**config_data)
    except ValidationError as e:
        lines = [
            f"{' -> '.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        ]
        raise ConfigurationError("Configuration validation failed:\n" + "\n".join(lines))


def save_config(config: Config, output_path: PathLike, format_type: Optional[str] = None) -> None:
    """
    Write a configuration as JSON or YAML.

    Args:
        config: Configuration to write
        output_path: Destination file; parent directories are created
        format_type: 'json' or 'yaml'; taken from the suffix if None

    Raises:
        ConfigurationError: For other formats or if the file cannot be written
    """
    path = Path(output_path)
    format_type = (format_type or path.suffix.lstrip(".")).lower()

    if format_type == "json":
        def write(data, fh):
            json.dump(data, fh, indent=2, ensure_ascii=False)
    elif format_type in ("yaml", "yml"):
        def write(data, fh):
            yaml.safe_dump(data, fh, default_flow_style=False, sort_keys=False)
    else:
        raise ConfigurationError(f"Unsupported configuration format: {format_type or path.name}")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as fh:
            write(config.model_dump(mode="json"), fh)
    except OSError as e:
        raise ConfigurationError(f"Error saving configuration to {path}: {e}")


def get_default_config() -> Config:
    """Configuration with every default value."""
    return Config()


def validate_config_file(config_path: PathLike) -> bool:
    """
    Check that a configuration file loads.

    Raises:
        ConfigurationError: If it does not
    """
    load_config(config_path)
    return True


def _parse_any(text: str) -> Dict[str, Any]:
    """Parse text of unknown format, trying JSON, YAML and TOML in that order."""
    for parser in (_parse_json, _parse_yaml, _parse_toml):
        try:
            data = parser(text)
        except _PARSE_ERRORS:
            continue
        if isinstance(data, dict):
            return data
    raise ConfigurationError("Unable to detect configuration format")


def _substitute_env_vars(data: Any) -> Any:
    """Resolve ``${NAME}`` references in every string of a parsed config."""
    if isinstance(data, dict):
        return {key: _substitute_env_vars(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_substitute_env_vars(item) for item in data]
    if isinstance(data, str):
        return _ENV_REFERENCE.sub(_resolve_env_reference, data)
    return data


def _resolve_env_reference(match: "re.Match[str]") -> str:
    name, default = match.group(1), match.group(2)
    for candidate in (ENV_PREFIX + name, name):
        if candidate in os.environ:
            return os.environ[candidate]
    # unresolved references without a default stay as written
    return default if default is not None else match.group(0)
