"""
Data models for backup runs.

BackupConfig is the input of a run, BackupReport its output. The report is
built through a mutable ReportBuilder owned by the runner and frozen exactly
once at the end of the run.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from .constants import DEFAULT_CHUNK_SIZE, DURATION_FORMAT, REPORT_TIME_FORMAT
from .errors import InvalidBackupType


class BackupType(Enum):
    FULL = "full"
    INCREMENTAL = "incremental"

    @classmethod
    def parse(cls, value: BackupType | str) -> BackupType:
        """Get BackupType from an enum member or a case-insensitive name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidBackupType(f"Unknown backup type: {value!r}") from None


@dataclass
class BackupConfig:
    """Input of a backup run."""

    source_path: Path
    destination_path: Path
    backup_type: BackupType = BackupType.FULL
    dry_run: bool = False
    atomic_writes: bool = False
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self):
        self.source_path = Path(self.source_path)
        self.destination_path = Path(self.destination_path)
        self.backup_type = BackupType.parse(self.backup_type)
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")


@dataclass(frozen=True)
class FileMetadata:
    """Size and permission bits of a single file."""

    path: Path
    size: int
    mode: int  # permission bits incl. setuid/setgid/sticky


@dataclass(frozen=True)
class BackupReport:
    """Outcome of a single backup run. Immutable once returned."""

    timestamp: datetime
    files_backed_up: int
    total_size_bytes: int
    duration: float  # seconds
    success: bool
    error_message: str | None = None
    errors: tuple[str, ...] = ()
    source_path: Path | None = None
    destination_path: Path | None = None
    backup_type: BackupType = BackupType.FULL
    dry_run: bool = False

    @property
    def duration_display(self) -> str:
        return DURATION_FORMAT.format(self.duration)

    @property
    def timestamp_display(self) -> str:
        return self.timestamp.strftime(REPORT_TIME_FORMAT)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "files_backed_up": self.files_backed_up,
            "total_size_bytes": self.total_size_bytes,
            "duration": self.duration,
            "success": self.success,
            "error_message": self.error_message,
            "errors": list(self.errors),
            "source_path": str(self.source_path) if self.source_path else None,
            "destination_path": str(self.destination_path) if self.destination_path else None,
            "backup_type": self.backup_type.value,
            "dry_run": self.dry_run,
        }


@dataclass
class ReportBuilder:
    """
    Accumulates the outcome of a run in progress.

    Starts successful; any recorded error flips ``success`` and overwrites
    the single ``error_message`` slot (last error wins) while the full
    history is kept in ``errors``.
    """

    config: BackupConfig | None = None
    files_backed_up: int = 0
    total_size_bytes: int = 0
    success: bool = True
    error_message: str | None = None
    errors: list[str] = field(default_factory=list)
    started: float = field(default_factory=time.monotonic)
    finalized: bool = False

    def record_file(self, size: int) -> None:
        self.files_backed_up += 1
        self.total_size_bytes += size

    def record_error(self, message: str) -> None:
        self.success = False
        self.error_message = message
        self.errors.append(message)

    def finalize(self) -> BackupReport:
        """Stamp duration and completion time and freeze the report."""
        if self.finalized:
            raise RuntimeError("Report already finalized")
        self.finalized = True

        duration = time.monotonic() - self.started
        config = self.config
        return BackupReport(
            timestamp=datetime.now(),
            files_backed_up=self.files_backed_up,
            total_size_bytes=self.total_size_bytes,
            duration=duration,
            success=self.success,
            error_message=self.error_message,
            errors=tuple(self.errors),
            source_path=config.source_path if config else None,
            destination_path=config.destination_path if config else None,
            backup_type=config.backup_type if config else BackupType.FULL,
            dry_run=config.dry_run if config else False,
        )
