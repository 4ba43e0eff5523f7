"""
Centralized constants for Tree Backup.

Modes, formats and sentinels shared across modules live here
to avoid duplication.
"""

# Mode for directories created under the destination (rwxr-xr-x)
DEFAULT_DIR_MODE = 0o755

# Read/write chunk size for file replication (1 MiB)
DEFAULT_CHUNK_SIZE = 1024 * 1024

# Suffix for in-flight files when atomic writes are enabled
PARTIAL_SUFFIX = ".partial"

# Backup name: <type>_backup_<timestamp>.tar
BACKUP_NAME_TIME_FORMAT = "%Y-%m-%d_%H-%M-%S"
BACKUP_NAME_EXTENSION = ".tar"

# Returned by generate_backup_name for unknown types - callers must treat it as an error
INVALID_BACKUP_NAME = "Wrong backup type"

# Report display formats
REPORT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DURATION_FORMAT = "{:.2f} seconds"
