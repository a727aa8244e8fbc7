"""Per-function deployment archives built from bundles and installed modules."""

from __future__ import annotations

import os
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from fnbundle.archive import zip_files
from fnbundle.manifest import ArtifactManifest, archive_digest
from fnbundle.models import ArchiveFile, FunctionBuildResult
from fnbundle.observability import StructuredLogger
from fnbundle.utils import human_size

MODULES_DIR_NAME = "node_modules"


def pack_functions(
    results: Sequence[FunctionBuildResult],
    *,
    build_dir: str | Path,
    output_dir: str | Path,
    modules_dir: str | Path | None = None,
    native_zip: bool = False,
    zip_concurrency: int | None = None,
    logger: StructuredLogger | None = None,
) -> ArtifactManifest:
    """Zip each function's bundle, its source map, and *modules_dir* into ``<alias>.zip``.

    At most *zip_concurrency* archives are written at once (all of them when
    unset). File metadata for the shared module tree is read once up front.
    """
    log = logger if logger is not None else StructuredLogger()
    if not results:
        return ArtifactManifest()

    build_root = Path(build_dir)
    output_root = Path(output_dir)
    module_files = collect_tree(modules_dir, prefix=MODULES_DIR_NAME) if modules_dir else []
    stat_cache = {file.root_path: file.root_path.stat() for file in module_files}

    def pack_one(result: FunctionBuildResult) -> tuple[str, Path]:
        files = [ArchiveFile.of(build_root / result.bundle_path, _archive_name(result.bundle_path))]
        source_map = build_root / f"{result.bundle_path}.map"
        if source_map.is_file():
            files.append(ArchiveFile.of(source_map, _archive_name(f"{result.bundle_path}.map")))
        files.extend(module_files)
        archive = zip_files(
            output_root / f"{result.alias}.zip",
            files,
            native=native_zip,
            stat_cache=stat_cache,
        )
        return result.alias, archive

    workers = zip_concurrency or len(results)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        archives = dict(pool.map(pack_one, results))

    for alias, archive in archives.items():
        log.log(
            operation="pack",
            function=alias,
            message=f"Zip function: {alias} [{human_size(archive.stat().st_size)}]",
        )

    return ArtifactManifest(
        digests={alias: archive_digest(path) for alias, path in archives.items()},
        archives=archives,
    )


def collect_tree(root: str | Path, *, prefix: str = "") -> list[ArchiveFile]:
    """List every file under *root* in sorted order, named relative to it."""
    root_path = Path(root)
    files: list[ArchiveFile] = []
    for current, dirs, names in os.walk(root_path):
        dirs.sort()
        for name in sorted(names):
            path = Path(current) / name
            relative = path.relative_to(root_path).as_posix()
            files.append(ArchiveFile(root_path=path, local_path=f"{prefix}/{relative}" if prefix else relative))
    return files


def _archive_name(path: str) -> str:
    return path.replace("\\", "/").lstrip("/")


__all__ = ["MODULES_DIR_NAME", "collect_tree", "pack_functions"]
