"""Config file loading for crossrun.

Reads JSON or YAML config files, chosen by file extension.
"""

import json
from pathlib import Path
from typing import Any, Mapping, Union

import yaml

from ..errors import ConfigFileError


def load_config_file(file_path: Union[str, Path]) -> dict[str, Any]:
    """Load a config file into a dictionary.

    Args:
        file_path: Path to a ``.json``, ``.yml`` or ``.yaml`` file.

    Returns:
        Parsed mapping. Unknown extensions and empty files yield ``{}``.

    Raises:
        ConfigFileError: If the file can't be read, is malformed, or
            doesn't contain a mapping.
    """
    file_path = Path(file_path).resolve()
    suffix = file_path.suffix.lower()

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        raise ConfigFileError(f"Cannot read config file {file_path}: {e}") from e

    try:
        if suffix == ".json":
            data = json.loads(text)
        elif suffix in (".yml", ".yaml"):
            data = yaml.safe_load(text)
        else:
            return {}
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigFileError(f"Malformed config file {file_path}: {e}") from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigFileError(
            f"Config file must contain a mapping, got {type(data).__name__}: {file_path}"
        )

    return data


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Return a new dict with ``override`` merged over ``base``.

    Nested mappings are merged recursively; any other value in
    ``override`` replaces the one in ``base``.
    """
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), Mapping):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result
