"""Packager contract and helpers shared by the package manager variants."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Protocol

from fnbundle.errors import SpawnError
from fnbundle.models import DependenciesResult
from fnbundle.process import spawn_process

LockfileContent = Mapping[str, Any] | str

_RELATIVE_FILE_REF = re.compile(r"^file:[^/]{2}")


class Packager(Protocol):
    name: str
    tool: str
    lockfile_name: str
    copy_package_section_names: tuple[str, ...]
    must_copy_modules: bool

    def get_prod_dependencies(self, cwd: str | Path, depth: int | None = None) -> DependenciesResult:
        """Return the production dependency tree declared at *cwd*."""

    def rebase_lockfile(self, path_to_package_root: str, lockfile: LockfileContent) -> LockfileContent:
        """Return *lockfile* with relative references valid from a new root."""

    def install(self, cwd: str | Path, extra_args: Sequence[str], use_lockfile: bool) -> None:
        """Materialize dependencies into *cwd*."""

    def prune(self, cwd: str | Path) -> None:
        """Remove non-production packages from *cwd*."""

    def run_scripts(self, cwd: str | Path, script_names: Sequence[str]) -> None:
        """Run manifest scripts concurrently; fail if any fails."""


def install_with_fallback(
    *,
    tool: str,
    cwd: str | Path,
    install_args: Sequence[str],
    production_args: Sequence[str],
    extra_args: Sequence[str],
) -> None:
    """Install production dependencies, retrying once without the production flags.

    Some tools reject their production flag in certain setups, so a failed
    production install gets exactly one plain retry. The retry's failure is
    the one that propagates.
    """
    try:
        spawn_process(tool, [*install_args, *production_args, *extra_args], cwd=cwd)
    except SpawnError:
        spawn_process(tool, [*install_args, *extra_args], cwd=cwd)


def run_scripts_concurrently(*, tool: str, cwd: str | Path, script_names: Sequence[str]) -> None:
    if not script_names:
        return
    with ThreadPoolExecutor(max_workers=len(script_names)) as pool:
        futures = [
            pool.submit(spawn_process, tool, ["run", script_name], cwd=cwd)
            for script_name in script_names
        ]
    for future in futures:
        future.result()


def rebase_file_references(path_to_package_root: str, version: str) -> str:
    if _RELATIVE_FILE_REF.match(version):
        file_path = version.removeprefix("file:")
        return f"file:{path_to_package_root}/{file_path}".replace("\\", "/")
    return version


def rebase_lockfile_entries(
    path_to_package_root: str,
    lockfile: Mapping[str, Any],
    *,
    fields: Sequence[str] = ("version",),
    sections: Sequence[str] = ("dependencies",),
) -> dict[str, Any]:
    """Rewrite relative ``file:`` references in *fields*, recursing through *sections*."""
    rebased = dict(lockfile)
    for key in fields:
        value = rebased.get(key)
        if isinstance(value, str):
            rebased[key] = rebase_file_references(path_to_package_root, value)
    for key in sections:
        section = rebased.get(key)
        if not isinstance(section, Mapping):
            continue
        rebased[key] = {
            name: (
                rebase_lockfile_entries(path_to_package_root, entry, fields=fields, sections=sections)
                if isinstance(entry, Mapping)
                else entry
            )
            for name, entry in section.items()
        }
    return rebased
