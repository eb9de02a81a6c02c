"""Configuration for grid-dialogs.

Two layers:
  - SubmissionConfig: per-pipeline settings passed to the resolver,
    the registry and the state machine.
  - GlobalConfig: user-level defaults loaded from
    ``$GRID_DIALOGS_HOME/config.yaml`` (``~/.config/grid-dialogs`` by default).
"""

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field

from grid_dialogs.core.models import FORM_ERROR_KEY

CONFIG_FILENAME = "config.yaml"


class SubmissionConfig(BaseModel):
    """Settings for form extraction and dialog submission."""

    error_key: str = FORM_ERROR_KEY
    fallback_message: str = "Validation failed"
    # Submit the active record when extraction yields no data
    fallback_to_record: bool = True
    # Overlay edit payloads on the active record instead of only injecting its id
    merge_record_on_edit: bool = False
    # Treat an empty payload as a validation failure for non-delete modes
    reject_empty_payload: bool = False
    # Seconds to wait once for a late form registration
    registration_grace: float = Field(default=0.1, ge=0.0)


class GlobalConfig(BaseModel):
    """User-level configuration file contents."""

    log_level: str = "WARNING"
    log_format: Literal["console", "json"] = "console"
    submission: SubmissionConfig = Field(default_factory=SubmissionConfig)


def get_grid_dialogs_home() -> Path:
    """Return the configuration home directory."""
    env_home = os.environ.get("GRID_DIALOGS_HOME")
    if env_home:
        return Path(env_home)
    return Path.home() / ".config" / "grid-dialogs"


def get_config_path() -> Path:
    """Return the path of the global configuration file."""
    return get_grid_dialogs_home() / CONFIG_FILENAME


def load_global_config(path: Path | str | None = None) -> GlobalConfig:
    """Load the global configuration.

    Args:
        path: Explicit config file. Defaults to get_config_path().

    Returns:
        The parsed GlobalConfig, or defaults if the file does not exist.

    Raises:
        ValueError: If the file is not a YAML mapping.
    """
    config_path = Path(path) if path else get_config_path()
    if not config_path.exists():
        return GlobalConfig()

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")

    return GlobalConfig.model_validate(data)


def save_global_config(config: GlobalConfig, path: Path | str | None = None) -> Path:
    """Write the global configuration and return the file path."""
    config_path = Path(path) if path else get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        yaml.dump(config.model_dump(mode="json"), f, sort_keys=False)
    return config_path
