"""Tests for single-file replication."""

import io
import os
import stat
from unittest.mock import MagicMock

import pytest

from tree_backup.errors import DestinationWriteError, PermissionCopyError, SourceReadError
from tree_backup.replicator import _read_chunks, replicate_file


def _mode(path):
    return stat.S_IMODE(path.stat().st_mode)


def _partials(directory):
    return sorted(directory.glob(".*.partial"))


@pytest.fixture
def src_file(tmp_path):
    src = tmp_path / "src.bin"
    src.write_bytes(b"0123456789")
    os.chmod(src, 0o640)
    return src


class TestReplicateFile:

    def test_copies_content_and_mode(self, tmp_path, src_file):
        dst = tmp_path / "dst.bin"

        written = replicate_file(src_file, dst)

        assert written == 10
        assert dst.read_bytes() == b"0123456789"
        assert _mode(dst) == 0o640

    def test_executable_mode(self, tmp_path, src_file):
        os.chmod(src_file, 0o755)
        dst = tmp_path / "dst.bin"
        replicate_file(src_file, dst)
        assert _mode(dst) == 0o755

    def test_small_chunks(self, tmp_path, src_file):
        dst = tmp_path / "dst.bin"
        assert replicate_file(src_file, dst, chunk_size=3) == 10
        assert dst.read_bytes() == b"0123456789"

    def test_empty_file(self, tmp_path):
        src = tmp_path / "empty"
        src.touch()
        dst = tmp_path / "copy"
        assert replicate_file(src, dst) == 0
        assert dst.exists()
        assert dst.read_bytes() == b""

    def test_overwrites_existing(self, tmp_path, src_file):
        dst = tmp_path / "dst.bin"
        dst.write_bytes(b"old content that is longer")
        replicate_file(src_file, dst)
        assert dst.read_bytes() == b"0123456789"

    def test_overwrites_read_only_copy(self, tmp_path, src_file):
        """A read-only copy from a previous run does not block a rerun."""
        os.chmod(src_file, 0o444)
        dst = tmp_path / "dst.bin"
        replicate_file(src_file, dst)
        replicate_file(src_file, dst)
        assert dst.read_bytes() == b"0123456789"
        assert _mode(dst) == 0o444

    def test_does_not_modify_source(self, tmp_path, src_file):
        before = src_file.stat()
        replicate_file(src_file, tmp_path / "dst.bin")
        after = src_file.stat()
        assert src_file.read_bytes() == b"0123456789"
        assert before.st_mode == after.st_mode

    def test_missing_source(self, tmp_path):
        dst = tmp_path / "dst.bin"
        with pytest.raises(SourceReadError) as exc_info:
            replicate_file(tmp_path / "missing", dst)
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)
        assert not dst.exists()

    def test_missing_destination_parent(self, tmp_path, src_file):
        with pytest.raises(DestinationWriteError):
            replicate_file(src_file, tmp_path / "no" / "such" / "dir" / "dst.bin")

    def test_destination_is_directory(self, tmp_path, src_file):
        dst = tmp_path / "dst"
        dst.mkdir()
        with pytest.raises(DestinationWriteError):
            replicate_file(src_file, dst)
        assert dst.is_dir()

    def test_chmod_failure_leaves_partial_copy(self, tmp_path, src_file, monkeypatch):
        """Without atomic writes, content stays behind when the mode copy fails."""

        def deny(*args, **kwargs):
            raise PermissionError(1, "Operation not permitted")

        monkeypatch.setattr("tree_backup.replicator.os.chmod", deny)
        dst = tmp_path / "dst.bin"

        with pytest.raises(PermissionCopyError):
            replicate_file(src_file, dst)

        assert dst.read_bytes() == b"0123456789"

    def test_write_failure(self, tmp_path, src_file, monkeypatch):
        real_open = open
        dst = tmp_path / "dst.bin"

        def fake_open(path, mode="r", *args, **kwargs):
            if "w" in mode:
                handle = MagicMock()
                handle.__enter__.return_value.write.side_effect = OSError(28, "No space left on device")
                handle.__exit__.return_value = False
                return handle
            return real_open(path, mode, *args, **kwargs)

        monkeypatch.setattr("builtins.open", fake_open)

        with pytest.raises(DestinationWriteError) as exc_info:
            replicate_file(src_file, dst)
        assert exc_info.value.__cause__.errno == 28


class TestAtomicReplicate:

    def test_success_leaves_no_partial(self, tmp_path, src_file):
        dst = tmp_path / "dst.bin"
        replicate_file(src_file, dst, atomic=True)
        assert dst.read_bytes() == b"0123456789"
        assert _mode(dst) == 0o640
        assert _partials(tmp_path) == []

    def test_existing_partial_named_file_is_kept(self, tmp_path, src_file):
        """A real file named like a partial file is not used as the write target."""
        lookalike = tmp_path / ".dst.bin.partial"
        lookalike.write_bytes(b"mine")
        dst = tmp_path / "dst.bin"

        replicate_file(src_file, dst, atomic=True)

        assert lookalike.read_bytes() == b"mine"
        assert dst.read_bytes() == b"0123456789"

    def test_replaces_read_only_copy(self, tmp_path, src_file):
        os.chmod(src_file, 0o444)
        dst = tmp_path / "dst.bin"
        replicate_file(src_file, dst, atomic=True)
        replicate_file(src_file, dst, atomic=True)
        assert dst.read_bytes() == b"0123456789"

    def test_missing_destination_parent(self, tmp_path, src_file):
        with pytest.raises(DestinationWriteError):
            replicate_file(src_file, tmp_path / "no" / "dst.bin", atomic=True)

    def test_failure_keeps_previous_copy(self, tmp_path, src_file, monkeypatch):
        dst = tmp_path / "dst.bin"
        dst.write_bytes(b"previous")

        def deny(*args, **kwargs):
            raise PermissionError(1, "Operation not permitted")

        monkeypatch.setattr("tree_backup.replicator.os.chmod", deny)

        with pytest.raises(PermissionCopyError):
            replicate_file(src_file, dst, atomic=True)

        assert dst.read_bytes() == b"previous"
        assert _partials(tmp_path) == []


class TestReadChunks:

    def test_yields_chunks(self, tmp_path):
        handle = io.BytesIO(b"abcdefg")
        assert list(_read_chunks(handle, tmp_path / "f", 3)) == [b"abc", b"def", b"g"]

    def test_read_error(self, tmp_path):
        handle = MagicMock()
        handle.read.side_effect = OSError(5, "Input/output error")
        with pytest.raises(SourceReadError):
            list(_read_chunks(handle, tmp_path / "f", 3))
