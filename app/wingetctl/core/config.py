"""Settings for wingetctl.

Settings are stored in ~/.config/wingetctl/config.toml. A missing file
means defaults; an invalid one is an error.
"""

import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from wingetctl.core.paths import get_config_path


class Settings(BaseModel):
    """Runtime settings.

    Attributes:
        executable: winget binary name or path.
        query_timeout: Timeout for status queries (list, upgrade check, show).
        action_timeout: Timeout for install, uninstall and upgrade.
        accept_agreements: Pass --accept-*-agreements so winget never prompts.
    """

    model_config = ConfigDict(extra="forbid")

    executable: Annotated[
        str,
        Field(min_length=1, description="winget executable name or path"),
    ] = "winget"
    query_timeout: Annotated[
        float,
        Field(gt=0, le=300, description="Query timeout in seconds"),
    ] = 10.0
    action_timeout: Annotated[
        float,
        Field(gt=0, le=7200, description="Action timeout in seconds"),
    ] = 1800.0
    accept_agreements: Annotated[
        bool,
        Field(description="Accept package and source agreements automatically"),
    ] = True


class ConfigError(Exception):
    """Base exception for settings errors."""


class ConfigParseError(ConfigError):
    """Raised when the settings file cannot be parsed."""


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from a TOML file.

    Args:
        path: Path to the settings file. If None, uses the default path.

    Returns:
        Validated Settings; defaults if the file does not exist.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the file cannot be read or the content is invalid.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        return Settings()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read settings: {e}") from e

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings content: {e}") from e


def save_settings(settings: Settings, path: Path | None = None) -> Path:
    """Save settings to a TOML file atomically.

    Args:
        settings: Settings to save.
        path: Path to save to. If None, uses the default path.

    Returns:
        Path where the settings were saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(settings.model_dump(), f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write settings: {e}") from e

    return config_path
