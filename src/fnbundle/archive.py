"""Deterministic zip archive creation.

Two strategies produce the same entry names:

- native: hard-link (or copy) every file into a scoped staging directory and
  run the system ``zip`` binary over it;
- streaming: write entries straight from their source paths with
  :mod:`zipfile`, pinning every timestamp so identical inputs give
  byte-identical archives.
"""

from __future__ import annotations

import os
import shutil
import stat
import zipfile
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from pathlib import Path

from fnbundle.errors import ArchiveError
from fnbundle.models import ArchiveFile
from fnbundle.process import spawn_process
from fnbundle.scope import make_path, temp_path_scope

# Earliest timestamp the zip format can represent.
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)
UNIX_SYSTEM = 3

StatCache = Mapping[Path, os.stat_result]


def zip_files(
    zip_path: str | Path,
    files: Iterable[ArchiveFile],
    *,
    native: bool = False,
    stat_cache: StatCache | None = None,
    zip_tool: str = "zip",
) -> Path:
    """Write *files* into the archive at *zip_path* and return its path."""
    target = Path(zip_path).absolute()
    file_list = list(files)
    try:
        make_path(target.parent)
    except OSError as exc:
        raise ArchiveError(
            "Unable to create archive output directory.",
            context={"operation": "zip", "path": str(target.parent), "reason": str(exc)},
        ) from exc

    if native:
        _native_zip(target, file_list, zip_tool=zip_tool)
    else:
        _stream_zip(target, file_list, stat_cache=stat_cache)
    return target


def _native_zip(zip_path: Path, files: list[ArchiveFile], *, zip_tool: str) -> None:
    with temp_path_scope(zip_path.stem) as staging:
        try:
            with ThreadPoolExecutor() as pool:
                list(pool.map(partial(_link_or_copy, staging), files))
            # the zip binary appends to an existing archive instead of replacing it
            zip_path.unlink(missing_ok=True)
        except OSError as exc:
            raise ArchiveError(
                "Unable to stage files for native zip.",
                context={"operation": "zip", "path": str(zip_path), "reason": str(exc)},
            ) from exc
        spawn_process(zip_tool, ["-q", "-r", "-X", str(zip_path), "."], cwd=staging)


def _link_or_copy(staging: Path, file: ArchiveFile) -> None:
    destination = staging / file.local_path
    destination.parent.mkdir(parents=True, exist_ok=True)
    try:
        os.link(file.root_path, destination)
    except OSError:
        if file.root_path.is_dir():
            shutil.copytree(file.root_path, destination, dirs_exist_ok=True)
        else:
            shutil.copy2(file.root_path, destination)


def _stream_zip(zip_path: Path, files: list[ArchiveFile], *, stat_cache: StatCache | None) -> None:
    try:
        with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for file in files:
                stats = _stat(file.root_path, stat_cache)
                if stat.S_ISDIR(stats.st_mode):
                    continue
                info = zipfile.ZipInfo(file.local_path, date_time=ZIP_EPOCH)
                info.compress_type = zipfile.ZIP_DEFLATED
                info.create_system = UNIX_SYSTEM
                info.external_attr = (stats.st_mode & 0xFFFF) << 16
                # ZIP64 headers are chosen from the declared size
                info.file_size = stats.st_size
                with file.root_path.open("rb") as source, archive.open(info, "w") as sink:
                    shutil.copyfileobj(source, sink)
    except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as exc:
        raise ArchiveError(
            "Unable to write zip archive.",
            hint="A partially written archive may remain at the target path.",
            context={"operation": "zip", "path": str(zip_path), "reason": str(exc)},
        ) from exc


def _stat(path: Path, stat_cache: StatCache | None) -> os.stat_result:
    if stat_cache is not None and path in stat_cache:
        return stat_cache[path]
    return path.stat()


__all__ = ["StatCache", "ZIP_EPOCH", "zip_files"]
