"""File I/O operations for writing replicated files."""

from __future__ import annotations

import os
import tempfile
from contextlib import suppress
from pathlib import Path


def ensure_parent(path: Path) -> None:
    """Ensure parent directories exist for the given path.

    Args:
        path: Path whose parent directories should be created
    """
    path.parent.mkdir(parents=True, exist_ok=True)


def atomic_write_bytes(path: Path, content: bytes, mode: int = 0o644) -> None:
    """Write bytes to a file atomically using a temporary file.

    Args:
        path: Destination file path
        content: Bytes to write
        mode: File permissions (octal)
    """
    ensure_parent(path)
    if path.is_dir():
        raise IsADirectoryError(f"Is a directory: {path}")

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
        os.chmod(path, mode)
    finally:
        if os.path.exists(tmp_name):
            with suppress(FileNotFoundError):
                os.remove(tmp_name)
