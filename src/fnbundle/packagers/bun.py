"""Bun packager."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from fnbundle.models import DependenciesResult
from fnbundle.packagers.base import LockfileContent, install_with_fallback, run_scripts_concurrently
from fnbundle.packagers.dependencies import read_prod_dependencies


@dataclass(frozen=True, slots=True)
class BunPackager:
    name: str = "bun"
    tool: str = "bun"
    lockfile_name: str = "bun.lock"
    copy_package_section_names: tuple[str, ...] = ()
    must_copy_modules: bool = True

    def get_prod_dependencies(self, cwd: str | Path, depth: int | None = None) -> DependenciesResult:
        return read_prod_dependencies(cwd)

    def rebase_lockfile(self, path_to_package_root: str, lockfile: LockfileContent) -> LockfileContent:
        return lockfile

    def install(self, cwd: str | Path, extra_args: Sequence[str], use_lockfile: bool) -> None:
        install_with_fallback(
            tool=self.tool,
            cwd=cwd,
            install_args=("install",),
            production_args=("--production",),
            extra_args=extra_args,
        )

    def prune(self, cwd: str | Path) -> None:
        # bun has no prune command
        return None

    def run_scripts(self, cwd: str | Path, script_names: Sequence[str]) -> None:
        run_scripts_concurrently(tool=self.tool, cwd=cwd, script_names=script_names)
