"""Path mapping and destination directory creation."""

import logging
import os
from pathlib import Path

from .constants import DEFAULT_DIR_MODE
from .errors import DirectoryCreateError, PathMappingError

logger = logging.getLogger(__name__)


def map_destination(source_root: Path, destination_root: Path, file_path: Path) -> Path:
    """
    Re-root a file from source_root under destination_root.

    Example:
        source_root = /data/projects
        destination_root = /mnt/backup
        file_path = /data/projects/web/src/app.py
        -> /mnt/backup/web/src/app.py

    Raises:
        PathMappingError: file_path is not strictly under source_root
    """
    source_root = Path(source_root).absolute()
    file_path = Path(file_path).absolute()

    try:
        relative = file_path.relative_to(source_root)
    except ValueError:
        raise PathMappingError(f"{file_path} is not under {source_root}", file_path) from None

    if not relative.parts:
        raise PathMappingError(f"{file_path} is the source root itself", file_path)

    return Path(destination_root) / relative


def ensure_directory(path: Path, mode: int = DEFAULT_DIR_MODE) -> Path:
    """
    Create path and any missing parents. An existing directory is a no-op.

    Missing levels are created top-down in a loop, so arbitrarily deep
    trees do not exhaust the call stack.

    Raises:
        DirectoryCreateError: creation failed or a non-directory is in the way
    """
    path = Path(path)

    missing = []
    current = path
    while not current.is_dir():
        missing.append(current)
        if current.parent == current:
            break
        current = current.parent

    if not missing:
        return path

    for directory in reversed(missing):
        try:
            os.mkdir(directory, mode)
        except FileExistsError as e:
            if directory.is_dir():
                continue
            raise DirectoryCreateError(f"Path exists and is not a directory: {directory}", directory) from e
        except OSError as e:
            raise DirectoryCreateError(f"Cannot create directory {directory}", directory) from e

    logger.debug(f"Created directory {path}")
    return path
