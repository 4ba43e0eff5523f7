"""
Configuration management with YAML loading and environment variable support.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .constants import DEFAULT_CHUNK_SIZE
from .models import BackupConfig, BackupType


def _env_path(env_var: str, default: Path | None = None) -> Path | None:
    """Get path from environment variable or return default."""
    if value := os.environ.get(env_var):
        return Path(value)
    return default


def _section(data: dict, name: str) -> dict:
    """Return a config section, treating a missing or empty one as {}."""
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"config section '{name}' must be a mapping, got {type(section).__name__}")
    return section


@dataclass
class PathsConfig:
    """Paths configuration - both can be overridden via environment variables."""

    source: Path | None = field(default_factory=lambda: _env_path("TBK_SOURCE"))
    destination: Path | None = field(default_factory=lambda: _env_path("TBK_DESTINATION"))


@dataclass
class BackupSettings:
    type: str = "full"
    atomic_writes: bool = False
    chunk_size: int = DEFAULT_CHUNK_SIZE


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class AppConfig:
    paths: PathsConfig = field(default_factory=PathsConfig)
    backup: BackupSettings = field(default_factory=BackupSettings)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> AppConfig:
        """
        Load configuration from YAML file.

        Raises:
            ValueError: the file is not valid YAML or has the wrong shape
        """
        if not path.exists():
            return cls()

        with open(path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e

        return cls._from_dict(data or {})

    @classmethod
    def _from_dict(cls, data: dict) -> AppConfig:
        """Create config from dictionary. Unknown keys are ignored."""
        if not isinstance(data, dict):
            raise ValueError(f"config must be a mapping, got {type(data).__name__}")

        config = cls()

        for key, value in _section(data, "paths").items():
            if not hasattr(config.paths, key):
                continue
            if value is not None and not isinstance(value, str):
                raise ValueError(f"paths.{key} must be a string, got {type(value).__name__}")
            setattr(config.paths, key, Path(value).expanduser() if value else None)

        for section in ("backup", "logging"):
            target = getattr(config, section)
            for key, value in _section(data, section).items():
                if not hasattr(target, key):
                    continue
                expected = type(getattr(target, key))
                if not isinstance(value, expected):
                    raise ValueError(f"{section}.{key} must be {expected.__name__}, got {type(value).__name__}")
                setattr(target, key, value)

        return config

    def to_backup_config(
        self,
        source: Path | None = None,
        destination: Path | None = None,
        backup_type: str | None = None,
        dry_run: bool = False,
        atomic_writes: bool | None = None,
    ) -> BackupConfig:
        """
        Build a BackupConfig; explicit arguments win over config values.

        Raises:
            ValueError: source or destination is not configured anywhere
            InvalidBackupType: backup type is not recognised
        """
        source = source or self.paths.source
        destination = destination or self.paths.destination
        if source is None:
            raise ValueError("source not configured (pass SOURCE, set TBK_SOURCE or paths.source)")
        if destination is None:
            raise ValueError("destination not configured (pass DEST, set TBK_DESTINATION or paths.destination)")

        return BackupConfig(
            source_path=source,
            destination_path=destination,
            backup_type=BackupType.parse(backup_type or self.backup.type),
            dry_run=dry_run,
            atomic_writes=self.backup.atomic_writes if atomic_writes is None else atomic_writes,
            chunk_size=int(self.backup.chunk_size),
        )


def _get_default_config_dir() -> Path:
    """Get default config directory."""
    if config_dir := os.environ.get("TBK_CONFIG_DIR"):
        return Path(config_dir)

    if xdg_config := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_config) / "tree-backup"

    return Path.home() / ".config" / "tree-backup"


def load_config(config_path: Path | None = None, config_dir: Path | None = None) -> AppConfig:
    """
    Load configuration, searching standard locations when no path is given.

    Args:
        config_path: Explicit config file
        config_dir: Directory to search (default: TBK_CONFIG_DIR / XDG / ~/.config)

    Returns:
        AppConfig (defaults if no file is found)
    """
    if config_path is None:
        config_dir = config_dir or _get_default_config_dir()
        search_paths = [
            config_dir / "config.yaml",
            Path.cwd() / "tree-backup.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = path
                break

    return AppConfig.from_yaml(config_path) if config_path else AppConfig()


def validate_paths(config: AppConfig) -> list[str]:
    """
    Validate that required paths are configured.

    Returns:
        List of error messages (empty if valid)
    """
    errors = []
    if config.paths.source is None:
        errors.append("source not configured (set TBK_SOURCE or in config file)")
    elif not config.paths.source.exists():
        errors.append(f"source does not exist: {config.paths.source}")
    elif not config.paths.source.is_dir():
        errors.append(f"source is not a directory: {config.paths.source}")

    if config.paths.destination is None:
        errors.append("destination not configured (set TBK_DESTINATION or in config file)")

    return errors
