"""Environment variable and configuration file loading."""

from pathlib import Path
from typing import Any

import yaml

CONFIG_DIR_NAME = ".pageaudit"


def global_config_path() -> Path:
    return Path.home() / CONFIG_DIR_NAME / "config.yml"


def is_global_config_dir(path: Path) -> bool:
    """Return True if the path is the global ~/.pageaudit config directory."""
    home_config = Path.home() / CONFIG_DIR_NAME
    try:
        return path.resolve() == home_config.resolve()
    except FileNotFoundError:
        return path == home_config


def find_project_dir(start: Path | None = None) -> Path | None:
    """Walk up from ``start`` looking for a ``.pageaudit`` directory.

    The global config folder in the home directory does not count as a
    project marker.
    """
    current = (start or Path.cwd()).resolve()
    while True:
        marker = current / CONFIG_DIR_NAME
        if marker.is_dir() and not is_global_config_dir(marker):
            return current
        if current == current.parent:
            return None
        current = current.parent


def load_env_file(env_path: Path) -> dict[str, str]:
    """Load environment variables from .env file."""
    env_vars = {}
    if env_path.exists():
        with open(env_path) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    # Remove quotes if present
                    value = value.strip().strip("\"'")
                    env_vars[key.strip()] = value
    return env_vars


def load_global_config() -> dict[str, Any]:
    """Load global configuration from ~/.pageaudit/config.yml."""
    config_path = global_config_path()
    if config_path.exists():
        with open(config_path) as f:
            return yaml.safe_load(f) or {}
    return {}


def load_project_config(project_dir: Path | None = None) -> dict[str, str]:
    """Load project-specific configuration from .pageaudit/.env."""
    if project_dir is None:
        project_dir = find_project_dir()

    if project_dir:
        return load_env_file(project_dir / CONFIG_DIR_NAME / ".env")

    return {}
