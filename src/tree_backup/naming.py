"""Backup archive naming."""

from datetime import datetime

from .constants import BACKUP_NAME_EXTENSION, BACKUP_NAME_TIME_FORMAT, INVALID_BACKUP_NAME
from .errors import InvalidBackupType
from .models import BackupType


def generate_backup_name(backup_type: BackupType | str, now: datetime | None = None) -> str:
    """
    Build an archive name embedding the backup type and a second-precision timestamp.

    Examples:
        full        -> full_backup_2024-03-09_14-05-00.tar
        incremental -> incremental_backup_2024-03-09_14-05-00.tar
        bogus       -> INVALID_BACKUP_NAME (never raises)
    """
    try:
        kind = BackupType.parse(backup_type)
    except InvalidBackupType:
        return INVALID_BACKUP_NAME

    stamp = (now or datetime.now()).strftime(BACKUP_NAME_TIME_FORMAT)
    return f"{kind.value}_backup_{stamp}{BACKUP_NAME_EXTENSION}"


def is_valid_backup_name(name: str) -> bool:
    return name != INVALID_BACKUP_NAME
