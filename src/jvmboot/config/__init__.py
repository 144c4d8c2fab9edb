"""Configuration management for the launcher."""

from .parser import (
    CONFIG_FILE_NAME,
    LauncherConfig,
    find_config_file,
    load_config,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "LauncherConfig",
    "find_config_file",
    "load_config",
]
