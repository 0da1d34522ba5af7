"""Path management for wingetctl.

This module provides standardized paths for configuration and state
storage. XDG variables win when set; on Windows the per-user
%LOCALAPPDATA% folder is used as the base otherwise.

Defaults:
- Config: ~/.config/wingetctl/          (Windows: %LOCALAPPDATA%/wingetctl/)
- State:  ~/.local/state/wingetctl/     (Windows: %LOCALAPPDATA%/wingetctl/state/)
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "wingetctl"

_WINDOWS = os.name == "nt"


def _get_app_dir(env_var: str, default_subdir: str, windows_subdir: str = "") -> Path:
    """Get an application directory respecting environment overrides.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").
        windows_subdir: Subdirectory under %LOCALAPPDATA%/wingetctl on Windows.

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME

    local_app_data = os.environ.get("LOCALAPPDATA")
    if _WINDOWS and local_app_data:
        app_dir = Path(local_app_data) / APP_NAME
        return app_dir / windows_subdir if windows_subdir else app_dir

    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/wingetctl/ (or XDG_CONFIG_HOME/wingetctl/).
    """
    return _get_app_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Get the state directory path.

    State data includes the catalog files, which carry the last resolved
    package status between runs.

    Returns:
        Path to ~/.local/state/wingetctl/ (or XDG_STATE_HOME/wingetctl/).
    """
    return _get_app_dir("XDG_STATE_HOME", ".local/state", "state")


def get_config_path() -> Path:
    """Get the settings file path.

    Returns:
        Path to ~/.config/wingetctl/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_default_catalog_path() -> Path:
    """Get the default catalog file path.

    Returns:
        Path to ~/.local/state/wingetctl/catalog_default.toml.
    """
    return get_state_dir() / "catalog_default.toml"


def get_custom_catalog_path() -> Path:
    """Get the user catalog file path.

    Returns:
        Path to ~/.config/wingetctl/catalog_custom.toml.
    """
    return get_config_dir() / "catalog_custom.toml"
