"""
Runners layer - Execution engines for backup runs.

Runners drive enumeration and per-file replication, reporting progress
through callbacks and returning a BackupReport.
"""

from .base import RunnerCallbacks, RunnerProtocol, RunState
from .sequential import SequentialRunner

__all__ = [
    "RunnerCallbacks",
    "RunnerProtocol",
    "RunState",
    "SequentialRunner",
]
