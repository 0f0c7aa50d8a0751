"""Configuration getter functions."""

import os
from pathlib import Path
from typing import Any

from .env_loader import load_global_config, load_project_config

TRUE_VALUES = {"1", "true", "yes", "on"}


def get_config(key: str, project_dir: Path | None = None, default: Any = None) -> Any:
    """
    Get configuration value with priority:
    1. Environment variable
    2. Project .env file
    3. Global config file
    4. Default value

    Args:
        key: Configuration key
        project_dir: Optional project directory
        default: Default value if not found

    Returns:
        Configuration value or default
    """
    # 1. Check environment variable
    env_value = os.environ.get(key)
    if env_value:
        return env_value

    # 2. Check project .env file
    project_config = load_project_config(project_dir)
    if key in project_config:
        return project_config[key]

    # 3. Check global config
    global_config = load_global_config()
    if key in global_config:
        return global_config[key]

    # 4. Return default
    return default


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUE_VALUES


def _as_float(value: Any, default: float) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def get_request_timeout(project_dir: Path | None = None) -> float:
    """Get page load timeout in seconds (default: 15)."""
    return _as_float(get_config("PAGEAUDIT_TIMEOUT", project_dir, default=15.0), 15.0)


def get_collect_timeout(project_dir: Path | None = None) -> float:
    """Get signal collection timeout in seconds (default: 5)."""
    return _as_float(get_config("PAGEAUDIT_COLLECT_TIMEOUT", project_dir, default=5.0), 5.0)


def get_verify_ssl(project_dir: Path | None = None) -> bool:
    """Whether TLS certificates are verified (default: true)."""
    return _as_bool(get_config("PAGEAUDIT_VERIFY_SSL", project_dir, default=True))


def get_user_agent(project_dir: Path | None = None) -> str | None:
    """Get the User-Agent override, if any."""
    return get_config("PAGEAUDIT_USER_AGENT", project_dir)


def get_fetch_subresources(project_dir: Path | None = None) -> bool:
    """Whether subresources are fetched into the request log (default: false)."""
    return _as_bool(get_config("PAGEAUDIT_FETCH_SUBRESOURCES", project_dir, default=False))


def is_debug_config_enabled(project_dir: Path | None = None) -> bool:
    """Whether debug output is enabled via configuration."""
    return _as_bool(get_config("PAGEAUDIT_DEBUG", project_dir, default=False))
