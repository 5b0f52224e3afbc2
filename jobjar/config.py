"""
Configuration management for jobjar.

Loads job-conf.yaml from the configuration directory. The file holds the
options handed to the loaded program's build() call, such as
parallelism.default.
"""

import os
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional

import yaml
from dotenv import load_dotenv

from jobjar.errors import ConfigError


CONFIG_FILE_NAME = "job-conf.yaml"

DEFAULT_CONF_DIR = Path("conf")

# Default directory for user jars, relative to the working directory
USER_LIB_DIRECTORY = "usrlib"

DEFAULT_PARALLELISM = "parallelism.default"


class Configuration:
    """Flat, string-keyed job configuration."""

    def __init__(self, data: Optional[Mapping[str, Any]] = None):
        self._data: Dict[str, Any] = {}
        if data:
            self._data.update(_flatten(data))

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def get_integer(self, key: str, default: Optional[int] = None) -> Optional[int]:
        """
        Get a value as an integer.

        Raises:
            ConfigError: If the value is present but not an integer
        """
        if key not in self._data:
            return default
        value = self._data[key]
        if isinstance(value, bool):
            raise ConfigError(f"Configuration key '{key}' must be an integer, got {value!r}")
        if isinstance(value, float) and not value.is_integer():
            raise ConfigError(f"Configuration key '{key}' must be an integer, got {value!r}")
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigError(f"Configuration key '{key}' must be an integer, got {value!r}")

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def contains(self, key: str) -> bool:
        return key in self._data

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Configuration):
            return NotImplemented
        return self._data == other._data

    def __repr__(self) -> str:
        return f"Configuration({self._data!r})"


def _flatten(data: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flatten nested mappings into dotted keys (parallelism: {default: 4})."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        full_key = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(_flatten(value, prefix=f"{full_key}."))
        else:
            flat[full_key] = value
    return flat


def get_conf_dir() -> Path:
    """Get configuration directory from JOBJAR_CONF_DIR or default to ./conf."""
    env_dir = os.environ.get("JOBJAR_CONF_DIR")
    if env_dir:
        return Path(env_dir).expanduser()
    return DEFAULT_CONF_DIR


def load_configuration(conf_dir: Optional[Path] = None) -> Configuration:
    """
    Load job configuration from job-conf.yaml.

    Args:
        conf_dir: Directory holding job-conf.yaml. Defaults to get_conf_dir().

    Returns:
        Configuration instance. Empty when the default directory has no
        config file.

    Raises:
        ConfigError: If an explicit conf_dir lacks the file, or the file
            is not a valid YAML mapping
    """
    explicit = conf_dir is not None
    if conf_dir is None:
        conf_dir = get_conf_dir()

    config_path = Path(conf_dir) / CONFIG_FILE_NAME
    if not config_path.exists():
        if explicit:
            raise ConfigError(f"Configuration file not found: {config_path}")
        return Configuration()

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax in {config_path}: {e}")
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file {config_path}: {e}") from e

    if data is None:
        return Configuration()
    if not isinstance(data, Mapping):
        raise ConfigError(f"Configuration file must contain a mapping: {config_path}")

    env_file = data.pop("env_file", None)
    if env_file:
        env_path = Path(env_file).expanduser()
        if not env_path.is_absolute():
            env_path = Path(conf_dir) / env_path
        if env_path.exists():
            load_dotenv(env_path)

    return Configuration(data)


def default_library_directory(working_directory: Optional[Path] = None) -> Optional[Path]:
    """Return usrlib/ under the working directory if it exists, else None."""
    base = Path(working_directory) if working_directory is not None else Path.cwd()
    candidate = base / USER_LIB_DIRECTORY
    if candidate.is_dir():
        return candidate
    return None
