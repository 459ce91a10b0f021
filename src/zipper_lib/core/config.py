# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Configuration system for zipper.

This module defines dataclasses representing the configurable aspects of
zipper: environment variables, archiver defaults, date formats and exit codes.

The `Config` class loads user configuration from a TOML file (if available)
and provides a globally accessible `CFG` instance.
"""

import os
import tomllib
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Self


@dataclass
class EnvironmentVariables:
    """Environment variable names used by zipper."""

    # Enables zipper debug mode.
    debug_mode: str = "ZIPPER_DEBUG"
    # Explicit path to the zipper config file.
    config: str = "ZIPPER_CONFIG"


@dataclass
class ArchiverSettings:
    """Settings for Archiver operations."""

    # Archive created when no output path is provided.
    default_output: str = "output.zip"
    # Size (in bytes) of the buffer used when streaming file contents into the archive.
    buffer_size: int = 32 * 1024
    # Name of the compression level used when none is provided.
    default_level: str = "default"


@dataclass
class DateFormats:
    """Date and time format strings."""

    # Standard date format used by zipper.
    standard: str = "%Y-%m-%d %H:%M:%S"


@dataclass
class ExitCodes:
    """Exit codes used for various errors."""

    # Returned when the archive could not be created.
    default: int = 1
    # Returned when the archive job was cancelled.
    cancelled: int = 130
    # Returned on an unexpected or unhandled error.
    unexpected_error: int = 99


@dataclass
class Config:
    """Main configuration for zipper."""

    env_vars: EnvironmentVariables = field(default_factory=EnvironmentVariables)
    archiver: ArchiverSettings = field(default_factory=ArchiverSettings)
    date_formats: DateFormats = field(default_factory=DateFormats)
    exit_codes: ExitCodes = field(default_factory=ExitCodes)

    # Name of the zipper binary.
    binary_name: str = "zipper"

    @classmethod
    def load(cls, config_path: Path | None = None) -> Self:
        """
        Load configuration from TOML file or use defaults.

        Args:
            config_path: Explicit path to config file. If None, searches standard locations.

        Returns:
            Config instance with loaded or default values.

        Raises:
            ValueError: If the config file exists but cannot be parsed.
        """
        if config_path is None:
            config_path = Config._get_config_path()

        try:
            if config_path and config_path.exists():
                with config_path.open("rb") as f:
                    config_data = tomllib.load(f)
                return _dict_to_dataclass(cls, config_data)
        except (OSError, tomllib.TOMLDecodeError, TypeError) as e:
            raise ValueError(f"Could not read zipper config '{config_path}': {e}.")

        # no config found - use defaults
        return cls()

    @staticmethod
    def _get_config_path() -> Path | None:
        """
        Search for config file in standard locations (XDG compliant).
        Returns the first existing config file, or None.
        """
        config_locations: list[Path | None] = [
            # explicit environment variable has the highest priority
            Path(env_path)
            if (env_path := os.getenv(EnvironmentVariables.config))
            else None,
            # current working directory
            Path.cwd() / "zipper_config.toml",
            # XDG config home
            Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config"))
            / "zipper"
            / "config.toml",
        ]

        for path in config_locations:
            if path and path.is_file():
                return path

        return None


def _dict_to_dataclass(cls, data: dict[str, Any]):
    """
    Recursively convert a dictionary to a dataclass instance.
    Keys that do not correspond to any field are ignored.
    """
    if not is_dataclass(cls):
        return data

    field_values = {}
    for field_info in fields(cls):
        field_name = field_info.name
        field_type = field_info.type

        if field_name in data:
            value = data[field_name]
            if is_dataclass(field_type) and isinstance(value, dict):
                field_values[field_name] = _dict_to_dataclass(field_type, value)
            else:
                field_values[field_name] = value

    return cls(**field_values)


# Global configuration for zipper.
CFG = Config.load()
