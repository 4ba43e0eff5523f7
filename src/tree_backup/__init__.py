"""
Tree Backup (tbk) - Full-tree directory backup

Replicates a source directory under a destination with:
- Recursive, deterministic enumeration that tolerates bad entries
- Byte-for-byte copies with permission bits preserved
- Best-effort setup, fail-fast copy loop
- A structured report per run (files, bytes, duration, errors)
"""

__version__ = "0.1.0"
__package_name__ = "tree-backup"
__short_name__ = "tbk"
