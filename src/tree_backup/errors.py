"""
Error taxonomy for backup runs.

Every error carries the path it concerns; the underlying OSError, when there
is one, is chained as ``__cause__``. The runner turns these into report
entries - none of them escape ``SequentialRunner.run``.
"""

from pathlib import Path


class BackupError(Exception):
    """Base class for all backup failures."""

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.path = path


class DirectoryCreateError(BackupError):
    """A destination directory could not be created."""


class EnumerationFailed(BackupError):
    """The enumeration root could not be opened."""


class PathMappingError(BackupError):
    """A file path does not lie under the source root."""


class SourceReadError(BackupError):
    """Source file content could not be read."""


class DestinationWriteError(BackupError):
    """Destination file could not be written."""


class PermissionCopyError(BackupError):
    """Source permission bits could not be applied to the destination."""


class MetadataReadError(BackupError):
    """A file could not be stat'd."""


class MetadataNotFound(MetadataReadError):
    """The file does not exist."""


class MetadataAccessDenied(MetadataReadError):
    """The file exists but cannot be stat'd."""


class InvalidBackupType(BackupError, ValueError):
    """Backup type is neither 'full' nor 'incremental'."""


def describe(error: BaseException) -> str:
    """Render an error for a report, including the OS reason when chained."""
    cause = error.__cause__
    if isinstance(cause, OSError) and cause.strerror:
        return f"{error}: {cause.strerror}"
    return str(error)
