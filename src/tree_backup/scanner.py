"""
Tree enumeration - discovery of regular files under a root.

Order is deterministic: depth-first, entries sorted by name within each
directory. Symlinked directories are not descended (avoids cycles);
symlinks to regular files are emitted like regular files.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .errors import EnumerationFailed

logger = logging.getLogger(__name__)


@dataclass
class SkippedEntry:
    """An entry the walk could not use."""

    path: Path
    reason: str


@dataclass
class ScanResult:
    """Result of enumerating a tree."""

    root: Path
    files: list[Path] = field(default_factory=list)
    skipped: list[SkippedEntry] = field(default_factory=list)
    error: EnumerationFailed | None = None
    total_size_bytes: int = 0

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def total_files(self) -> int:
        return len(self.files)


def _sorted_entries(directory: Path, result: ScanResult) -> list[os.DirEntry]:
    try:
        with os.scandir(directory) as it:
            return sorted(it, key=lambda e: e.name)
    except OSError as e:
        logger.warning(f"Skipping unreadable directory {directory}: {e}")
        result.skipped.append(SkippedEntry(directory, e.strerror or str(e)))
        return []


def _walk(root: Path, result: ScanResult) -> None:
    # One iterator per open directory; depth is bounded by memory, not the call stack
    stack = [iter(_sorted_entries(root, result))]
    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue

        path = Path(entry.path)
        try:
            if entry.is_dir(follow_symlinks=False):
                stack.append(iter(_sorted_entries(path, result)))
            elif entry.is_file():
                size = entry.stat().st_size
                result.files.append(path)
                result.total_size_bytes += size
            elif entry.is_symlink():
                reason = "symlinked directory" if entry.is_dir() else "broken symlink"
                logger.warning(f"Skipping {reason}: {path}")
                result.skipped.append(SkippedEntry(path, reason))
            else:
                logger.debug(f"Skipping special file: {path}")
                result.skipped.append(SkippedEntry(path, "not a regular file"))
        except OSError as e:
            logger.warning(f"Error accessing {path}: {e}")
            result.skipped.append(SkippedEntry(path, e.strerror or str(e)))


def scan_tree(root: Path) -> ScanResult:
    """
    Recursively list every regular file under root.

    A bad entry (broken symlink, unreadable subdirectory) is logged and
    recorded in ``skipped``; the walk continues. Only a root that cannot be
    opened sets ``error``.

    Args:
        root: Directory to enumerate

    Returns:
        ScanResult with absolute file paths in deterministic order
    """
    root = Path(root).absolute()
    result = ScanResult(root=root)

    if not root.exists():
        result.error = EnumerationFailed(f"Source not found: {root}", root)
        return result

    if not root.is_dir():
        result.error = EnumerationFailed(f"Not a directory: {root}", root)
        return result

    try:
        # Probe the root separately so that an unreadable root is fatal
        # while unreadable subdirectories are not
        with os.scandir(root):
            pass
    except OSError as e:
        result.error = EnumerationFailed(f"Cannot open source {root}", root)
        result.error.__cause__ = e
        return result

    _walk(root, result)
    return result


def enumerate_files(root: Path) -> tuple[list[Path], EnumerationFailed | None]:
    """Return (files, error) for root; files is whatever was gathered."""
    result = scan_tree(root)
    return result.files, result.error
