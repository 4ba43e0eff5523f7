"""
File replication - copy one file's bytes and permission bits.

Three failure points, each with its own error:
- reading the source          -> SourceReadError
- writing the destination     -> DestinationWriteError
- applying the source mode    -> PermissionCopyError

Without atomic writes a failed copy can leave a partially written
destination file behind; nothing is rolled back.
"""

import logging
import os
import tempfile
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

from .constants import DEFAULT_CHUNK_SIZE, PARTIAL_SUFFIX
from .errors import (
    DestinationWriteError,
    MetadataReadError,
    PermissionCopyError,
    SourceReadError,
)
from .metadata import read_metadata

logger = logging.getLogger(__name__)


def _read_chunks(handle: BinaryIO, src: Path, chunk_size: int) -> Iterator[bytes]:
    while True:
        try:
            chunk = handle.read(chunk_size)
        except OSError as e:
            raise SourceReadError(f"Cannot read {src}", src) from e
        if not chunk:
            return
        yield chunk


def _remove_existing(dst: Path) -> None:
    """Unlink a previous copy so read-only files from an earlier run never block a rerun."""
    if dst.is_symlink() or dst.is_file():
        try:
            dst.unlink()
        except OSError as e:
            raise DestinationWriteError(f"Cannot replace {dst}", dst) from e


def _create_partial(dst: Path) -> tuple[int, Path]:
    """
    Create a uniquely named hidden sibling of dst to write into.

    The name is never one that already exists, so a source file that happens
    to look like a partial file is never overwritten by it.
    """
    try:
        fd, name = tempfile.mkstemp(dir=dst.parent, prefix=f".{dst.name}.", suffix=PARTIAL_SUFFIX)
    except OSError as e:
        raise DestinationWriteError(f"Cannot create temporary file next to {dst}", dst) from e
    return fd, Path(name)


def _copy_mode(src: Path, target: Path) -> None:
    try:
        mode = read_metadata(src).mode
    except MetadataReadError as e:
        raise PermissionCopyError(f"Cannot read mode of {src}", src) from e.__cause__

    try:
        os.chmod(target, mode)
    except OSError as e:
        raise PermissionCopyError(f"Cannot set mode {oct(mode)} on {target}", target) from e


def replicate_file(
    src: Path,
    dst: Path,
    atomic: bool = False,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    """
    Copy src content and permission mode to dst, overwriting dst.

    Args:
        src: Source file
        dst: Destination file (its parent must exist)
        atomic: Write to a hidden partial file and rename into place on success
        chunk_size: Bytes per read

    Returns:
        Number of bytes written

    Raises:
        SourceReadError, DestinationWriteError, PermissionCopyError
    """
    src = Path(src)
    dst = Path(dst)

    try:
        src_handle = open(src, "rb")
    except OSError as e:
        raise SourceReadError(f"Cannot open {src}", src) from e

    partial: Path | None = None
    written = 0
    try:
        with src_handle:
            if atomic:
                fd, partial = _create_partial(dst)
            else:
                _remove_existing(dst)
            target = partial or dst
            try:
                dst_handle = os.fdopen(fd, "wb") if partial else open(dst, "wb")
                with dst_handle:
                    for chunk in _read_chunks(src_handle, src, chunk_size):
                        dst_handle.write(chunk)
                        written += len(chunk)
            except OSError as e:
                raise DestinationWriteError(f"Cannot write {target}", target) from e

        _copy_mode(src, target)

        if partial is not None:
            try:
                os.replace(partial, dst)
            except OSError as e:
                raise DestinationWriteError(f"Cannot move {partial} into place", dst) from e
    except (SourceReadError, DestinationWriteError, PermissionCopyError):
        if partial is not None:
            try:
                partial.unlink(missing_ok=True)
            except OSError as cleanup_error:
                logger.warning(f"Could not remove partial file {partial}: {cleanup_error}")
        raise

    logger.debug(f"Copied {src} -> {dst} ({written} bytes)")
    return written
