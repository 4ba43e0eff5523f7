"""File metadata: size and permission bits from a single stat."""

import stat
from pathlib import Path

from .errors import MetadataAccessDenied, MetadataNotFound, MetadataReadError
from .models import FileMetadata


def read_metadata(path: Path) -> FileMetadata:
    """
    Stat a file for its size and permission mode.

    Args:
        path: File to inspect (symlinks are followed)

    Returns:
        FileMetadata with size in bytes and mode bits (S_IMODE)

    Raises:
        MetadataNotFound: path does not exist
        MetadataAccessDenied: path cannot be stat'd due to permissions
        MetadataReadError: any other stat failure
    """
    path = Path(path)
    try:
        st = path.stat()
    except FileNotFoundError as e:
        raise MetadataNotFound(f"File not found: {path}", path) from e
    except PermissionError as e:
        raise MetadataAccessDenied(f"Access denied: {path}", path) from e
    except OSError as e:
        raise MetadataReadError(f"Cannot stat {path}", path) from e

    return FileMetadata(path=path, size=st.st_size, mode=stat.S_IMODE(st.st_mode))
