"""Base runner classes and protocols."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol

from ..models import BackupConfig, BackupReport


class RunState(Enum):
    """Phase of a backup run."""

    IDLE = "idle"
    DIRECTORY_PREP = "directory_prep"
    ENUMERATING = "enumerating"
    COPYING_FILES = "copying_files"
    FINALIZED = "finalized"


@dataclass
class RunnerCallbacks:
    """
    Callbacks for runner progress reporting.

    Allows CLI to display progress without coupling runner to Rich/UI.
    All callbacks are optional - if None, no callback is made.
    """

    # Run lifecycle
    on_run_start: Callable[[BackupConfig], None] | None = None
    on_state_change: Callable[[RunState], None] | None = None
    on_run_complete: Callable[[BackupReport], None] | None = None

    # Enumeration results
    on_scan_complete: Callable[[int, int], None] | None = None  # files, skipped

    # Per-file progress
    on_file_start: Callable[[Path, int, int], None] | None = None  # path, index, total
    on_file_complete: Callable[[Path, int, int, int], None] | None = None  # path, size, index, total

    # Recorded failures
    on_error: Callable[[RunState, str], None] | None = None  # stage, message


class RunnerProtocol(Protocol):
    """Protocol for backup runners."""

    def run(self, config: BackupConfig, callbacks: RunnerCallbacks | None = None) -> BackupReport:
        """
        Execute a backup.

        Args:
            config: What to back up and where
            callbacks: Optional callbacks for progress reporting

        Returns:
            BackupReport with the outcome
        """
        ...
