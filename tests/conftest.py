"""Shared pytest fixtures for tree-backup tests."""

import os
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def source_tree(tmp_path):
    """Create a source tree: a.txt (5 bytes) and sub/b.txt (10 bytes)."""
    source = tmp_path / "source"
    (source / "sub").mkdir(parents=True)

    (source / "a.txt").write_bytes(b"hello")
    (source / "sub" / "b.txt").write_bytes(b"0123456789")

    os.chmod(source / "a.txt", 0o640)
    os.chmod(source / "sub" / "b.txt", 0o755)

    return source


@pytest.fixture
def destination(tmp_path):
    """Destination path (not created)."""
    return tmp_path / "backup"


@pytest.fixture
def sample_config(tmp_path, source_tree, destination):
    """Create a sample config file pointing at source_tree."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        f"""
paths:
  source: "{source_tree}"
  destination: "{destination}"

backup:
  type: full
  atomic_writes: false
  chunk_size: 4096

logging:
  level: WARNING
"""
    )
    return config_file


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep host TBK_* variables out of tests."""
    for var in ("TBK_SOURCE", "TBK_DESTINATION", "TBK_CONFIG_DIR"):
        monkeypatch.delenv(var, raising=False)


def _remove_chain(root: Path) -> None:
    """Delete a single-branch directory chain bottom-up without recursing."""
    chain = [root]
    while True:
        subdirs = [p for p in chain[-1].iterdir() if p.is_dir()]
        if not subdirs:
            break
        chain.append(subdirs[0])

    for directory in reversed(chain):
        for child in directory.iterdir():
            if not child.is_dir():
                child.unlink()
        directory.rmdir()


@pytest.fixture
def deep_tree(tmp_path, destination):
    """One file nested deeper than the interpreter's recursion limit."""
    root = tmp_path / "deep"
    root.mkdir()
    leaf_dir = root
    for _ in range(sys.getrecursionlimit() + 100):
        leaf_dir = leaf_dir / "a"
        leaf_dir.mkdir()
    leaf = leaf_dir / "leaf.txt"
    leaf.write_text("deep")

    yield leaf

    # shutil.rmtree recurses per level on older interpreters
    for chain_root in (root, destination):
        if chain_root.is_dir():
            _remove_chain(chain_root)
