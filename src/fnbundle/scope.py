"""Scoped temporary directories."""

from __future__ import annotations

import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path


@contextmanager
def temp_path_scope(name: str, *, parent: str | Path | None = None) -> Iterator[Path]:
    """Yield a fresh, uniquely named directory and remove it on exit.

    Removal happens on every exit path, including when the body raises.
    """
    temp_root = Path(tempfile.mkdtemp(prefix=f"{name}-", dir=str(parent) if parent else None))
    try:
        yield temp_root
    finally:
        shutil.rmtree(temp_root, ignore_errors=True)


def make_path(path: str | Path) -> Path:
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory
