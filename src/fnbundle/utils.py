"""Path and formatting helpers."""

from __future__ import annotations

import math
import os
from collections.abc import Sequence
from pathlib import Path

LOCKFILE_NAMES = ("yarn.lock", "pnpm-lock.yaml", "package-lock.json", "bun.lock", "bun.lockb")

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def find_up(names: str | Sequence[str], directory: str | Path | None = None) -> Path | None:
    """Return the closest directory at or above *directory* containing any of *names*."""
    candidates = (names,) if isinstance(names, str) else tuple(names)
    current = Path(directory or os.getcwd()).resolve()
    for folder in (current, *current.parents):
        if any((folder / name).exists() for name in candidates):
            return folder
    return None


def find_project_root(root_dir: str | Path | None = None) -> Path | None:
    """Forward *root_dir*, or locate the project root by its lockfile."""
    if root_dir is not None:
        return Path(root_dir)
    return find_up(LOCKFILE_NAMES)


def human_size(size: int) -> str:
    if size <= 0:
        return "0.00 B"
    exponent = min(int(math.log(size, 1024)), len(_SIZE_UNITS) - 1)
    return f"{size / 1024**exponent:.2f} {_SIZE_UNITS[exponent]}"


def trim_extension(entry: str) -> str:
    return os.path.splitext(entry)[0]
