"""
Configuration file parsing and management.

Reads YAML configuration files (JSON for files ending in .json) and merges
them from multiple sources (custom path → project → user → defaults).
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any

import yaml

from .common import vlog


# Configuration file locations (in priority order)
CONFIG_LOCATIONS = [
    ".scoop-inventory.yml",                                      # Project root (highest priority)
    ".scoop-inventory.yaml",
    os.path.expanduser("~/.config/scoop-inventory/config.yml"),  # User global
    os.path.expanduser("~/.config/scoop-inventory/config.yaml"),
]

DEFAULT_MAX_WORKERS = 8
DEFAULT_DEBOUNCE_SECONDS = 1.0
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class InventoryConfig:
    """
    Configuration for the installed-package inventory.

    Attributes:
        version: Config schema version
        scoop_path: Scoop root directory (None means auto-detect)
        max_workers: Maximum number of parallel package resolvers
        debounce_seconds: Minimum spacing between two refreshes
        log_level: Console log level
        log_file: Optional log file path
        source: Path to the configuration file that was loaded
    """
    version: int = 1
    scoop_path: str | None = None
    max_workers: int = DEFAULT_MAX_WORKERS
    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS
    log_level: str = "INFO"
    log_file: str | None = None
    source: str = ""

    def __post_init__(self):
        """Validate config after initialization."""
        if self.version != 1:
            raise ValueError(f"Unsupported config version: {self.version}. Expected version 1")

        if self.max_workers < 1 or self.max_workers > 32:
            raise ValueError(
                f"Invalid max_workers: {self.max_workers}. "
                "Must be between 1 and 32"
            )

        if self.debounce_seconds < 0 or self.debounce_seconds > 60:
            raise ValueError(
                f"Invalid debounce_seconds: {self.debounce_seconds}. "
                "Must be between 0 and 60"
            )

        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log_level: {self.log_level}. "
                f"Must be one of: {', '.join(sorted(VALID_LOG_LEVELS))}"
            )

    @staticmethod
    def from_dict(data: dict[str, Any], source: str = "") -> InventoryConfig:
        """Create InventoryConfig from dictionary."""
        logging_data = data.get("logging", {}) or {}
        scoop_path = data.get("scoop_path")

        return InventoryConfig(
            version=data.get("version", 1),
            scoop_path=str(scoop_path) if scoop_path else None,
            max_workers=int(data.get("max_workers", DEFAULT_MAX_WORKERS)),
            debounce_seconds=float(data.get("debounce_seconds", DEFAULT_DEBOUNCE_SECONDS)),
            log_level=str(logging_data.get("level", "INFO")),
            log_file=logging_data.get("file"),
            source=source,
        )

    def merge_with(self, other: InventoryConfig) -> InventoryConfig:
        """
        Merge this config with another, preferring values from this config.

        Args:
            other: Other config to merge (lower priority)

        Returns:
            New merged InventoryConfig object
        """
        return InventoryConfig(
            version=self.version,
            scoop_path=self.scoop_path or other.scoop_path,
            max_workers=self.max_workers if self.max_workers != DEFAULT_MAX_WORKERS else other.max_workers,
            debounce_seconds=(
                self.debounce_seconds
                if self.debounce_seconds != DEFAULT_DEBOUNCE_SECONDS
                else other.debounce_seconds
            ),
            log_level=self.log_level if self.log_level != "INFO" else other.log_level,
            log_file=self.log_file or other.log_file,
            source=self.source or other.source,
        )


def _load_yaml(file_path: str) -> dict[str, Any] | None:
    """
    Load YAML configuration file.

    Args:
        file_path: Path to YAML file

    Returns:
        Parsed configuration dictionary, or None if file invalid
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return None


def _load_json(file_path: str) -> dict[str, Any] | None:
    """
    Load JSON configuration file.

    Args:
        file_path: Path to JSON file

    Returns:
        Parsed configuration dictionary, or None if file invalid
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, json.JSONDecodeError):
        return None


def load_config_file(file_path: str, verbose: bool = False) -> InventoryConfig | None:
    """
    Load configuration from a single file.

    Args:
        file_path: Path to configuration file (.yml, .yaml or .json)
        verbose: Enable verbose logging

    Returns:
        InventoryConfig object, or None if file cannot be loaded
    """
    if not os.path.exists(file_path):
        return None

    vlog(f"Loading config from: {file_path}", verbose)

    if file_path.lower().endswith(".json"):
        data = _load_json(file_path)
    else:
        data = _load_yaml(file_path)

    if data is None:
        vlog(f"Invalid config file: {file_path}", verbose)
        return None

    try:
        config = InventoryConfig.from_dict(data, source=file_path)
    except (ValueError, TypeError) as e:
        vlog(f"Config validation failed for {file_path}: {e}", verbose)
        return None

    vlog(f"Loaded config successfully: {file_path}", verbose)
    return config


def load_config(
    custom_path: str | None = None,
    verbose: bool = False,
) -> InventoryConfig:
    """
    Load and merge configuration from all sources.

    Configuration precedence (highest to lowest):
    1. Custom path (if provided)
    2. Project .scoop-inventory.yml
    3. User ~/.config/scoop-inventory/config.yml
    4. Default configuration

    Args:
        custom_path: Optional path to custom configuration file
        verbose: Enable verbose logging

    Returns:
        Merged InventoryConfig (never None, returns defaults if no config found)

    Raises:
        ValueError: If custom_path is provided but file cannot be loaded
    """
    configs: list[InventoryConfig] = []

    if custom_path:
        config = load_config_file(custom_path, verbose)
        if config is None:
            raise ValueError(f"Could not load config from specified path: {custom_path}")
        configs.append(config)

    for location in CONFIG_LOCATIONS:
        config = load_config_file(location, verbose)
        if config is not None:
            configs.append(config)
            vlog(f"Found config at: {location}", verbose)

    if not configs:
        vlog("No config files found, using defaults", verbose)
        return InventoryConfig()

    # First config has highest priority
    merged = configs[0]
    for config in configs[1:]:
        merged = merged.merge_with(config)

    vlog(f"Merged {len(configs)} config files", verbose)
    return merged


def validate_config(config: InventoryConfig) -> list[str]:
    """
    Validate configuration and return list of warnings.

    Args:
        config: InventoryConfig object to validate

    Returns:
        List of validation warning messages (empty if valid)
    """
    warnings = []

    if config.scoop_path and not os.path.isdir(config.scoop_path):
        warnings.append(f"scoop_path does not exist: {config.scoop_path}")

    if config.debounce_seconds == 0:
        warnings.append("debounce_seconds is 0: every refresh rescans the apps directory")

    cpu_count = os.cpu_count() or 1
    if config.max_workers > cpu_count * 4:
        warnings.append(
            f"max_workers ({config.max_workers}) is much larger than the CPU count ({cpu_count})"
        )

    return warnings
