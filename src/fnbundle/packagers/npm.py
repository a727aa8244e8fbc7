"""npm packager."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from fnbundle.models import DependenciesResult
from fnbundle.packagers.base import (
    LockfileContent,
    install_with_fallback,
    rebase_lockfile_entries,
    run_scripts_concurrently,
)
from fnbundle.packagers.dependencies import read_prod_dependencies
from fnbundle.process import spawn_process


@dataclass(frozen=True, slots=True)
class NpmPackager:
    name: str = "npm"
    tool: str = "npm"
    lockfile_name: str = "package-lock.json"
    copy_package_section_names: tuple[str, ...] = ()
    must_copy_modules: bool = True

    def get_prod_dependencies(self, cwd: str | Path, depth: int | None = None) -> DependenciesResult:
        return read_prod_dependencies(cwd)

    def rebase_lockfile(self, path_to_package_root: str, lockfile: LockfileContent) -> LockfileContent:
        if not isinstance(lockfile, Mapping):
            return lockfile
        return rebase_lockfile_entries(
            path_to_package_root,
            lockfile,
            fields=("version", "resolved"),
            sections=("dependencies", "packages"),
        )

    def install(self, cwd: str | Path, extra_args: Sequence[str], use_lockfile: bool) -> None:
        # `npm ci` only works against an existing package-lock.json
        install_with_fallback(
            tool=self.tool,
            cwd=cwd,
            install_args=("ci",) if use_lockfile else ("install",),
            production_args=("--production",),
            extra_args=extra_args,
        )

    def prune(self, cwd: str | Path) -> None:
        spawn_process(self.tool, ["prune"], cwd=cwd)

    def run_scripts(self, cwd: str | Path, script_names: Sequence[str]) -> None:
        run_scripts_concurrently(tool=self.tool, cwd=cwd, script_names=script_names)
