"""
Configuration management for PageAudit.

Supports multiple configuration sources in order of priority:
1. Environment variables (highest priority)
2. Project .env file (.pageaudit/.env)
3. Global config file (~/.pageaudit/config.yml)
4. Default values (lowest priority)
"""

from .env_loader import (
    find_project_dir,
    global_config_path,
    is_global_config_dir,
    load_env_file,
    load_global_config,
    load_project_config,
)
from .getters import (
    get_collect_timeout,
    get_config,
    get_fetch_subresources,
    get_request_timeout,
    get_user_agent,
    get_verify_ssl,
    is_debug_config_enabled,
)

__all__ = [
    # env_loader
    "find_project_dir",
    "global_config_path",
    "is_global_config_dir",
    "load_env_file",
    "load_global_config",
    "load_project_config",
    # getters
    "get_collect_timeout",
    "get_config",
    "get_fetch_subresources",
    "get_request_timeout",
    "get_user_agent",
    "get_verify_ssl",
    "is_debug_config_enabled",
]
