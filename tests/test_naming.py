"""Tests for backup archive naming."""

from datetime import datetime

from tree_backup.constants import INVALID_BACKUP_NAME
from tree_backup.models import BackupType
from tree_backup.naming import generate_backup_name, is_valid_backup_name

NOW = datetime(2024, 3, 9, 14, 5, 7)


class TestGenerateBackupName:

    def test_full(self):
        assert generate_backup_name("full", NOW) == "full_backup_2024-03-09_14-05-07.tar"

    def test_incremental(self):
        name = generate_backup_name("incremental", NOW)
        assert name.startswith("incremental_backup_")
        assert name == "incremental_backup_2024-03-09_14-05-07.tar"

    def test_enum_member(self):
        assert generate_backup_name(BackupType.FULL, NOW) == "full_backup_2024-03-09_14-05-07.tar"

    def test_unknown_type_returns_sentinel(self):
        """Unknown types yield the sentinel instead of raising."""
        assert generate_backup_name("bogus", NOW) == INVALID_BACKUP_NAME
        assert generate_backup_name("", NOW) == INVALID_BACKUP_NAME

    def test_defaults_to_current_time(self):
        name = generate_backup_name("full")
        assert name.startswith(f"full_backup_{datetime.now():%Y-}")
        assert name.endswith(".tar")


class TestIsValidBackupName:

    def test_valid(self):
        assert is_valid_backup_name(generate_backup_name("full", NOW))

    def test_sentinel(self):
        assert not is_valid_backup_name(generate_backup_name("bogus", NOW))
