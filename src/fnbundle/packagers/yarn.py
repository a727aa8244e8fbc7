"""Yarn (classic) packager.

``yarn.lock`` is not JSON, so :meth:`YarnPackager.rebase_lockfile` accepts the
raw lockfile text as well as an already-parsed mapping.
"""

from __future__ import annotations

import posixpath
import re
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

_FILE_VERSION = re.compile(r'[^"/]@(?:file:)?((?:\./|\.\./).*?)[":,]', re.MULTILINE)


@dataclass(frozen=True, slots=True)
class YarnPackager:
    name: str = "yarn"
    tool: str = "yarn"
    lockfile_name: str = "yarn.lock"
    copy_package_section_names: tuple[str, ...] = ("resolutions",)
    must_copy_modules: bool = False

    def get_prod_dependencies(self, cwd: str | Path, depth: int | None = None) -> DependenciesResult:
        return read_prod_dependencies(cwd)

    def rebase_lockfile(self, path_to_package_root: str, lockfile: LockfileContent) -> LockfileContent:
        if isinstance(lockfile, Mapping):
            return rebase_lockfile_entries(
                path_to_package_root,
                lockfile,
                fields=("version", "resolved"),
                sections=("dependencies",),
            )
        root = path_to_package_root.replace("\\", "/")

        def rebase(match: re.Match[str]) -> str:
            start, end = match.span(1)
            offset = match.start()
            new_ref = posixpath.normpath(posixpath.join(root, match.group(1)))
            text = match.group(0)
            return text[: start - offset] + new_ref + text[end - offset :]

        return _FILE_VERSION.sub(rebase, lockfile)

    def install(self, cwd: str | Path, extra_args: Sequence[str], use_lockfile: bool) -> None:
        install_args = ["install", "--non-interactive"]
        if use_lockfile:
            install_args.append("--frozen-lockfile")
        install_with_fallback(
            tool=self.tool,
            cwd=cwd,
            install_args=install_args,
            production_args=("--production",),
            extra_args=extra_args,
        )

    def prune(self, cwd: str | Path) -> None:
        # yarn has no prune; a production re-install drops dev packages
        self.install(cwd, (), True)

    def run_scripts(self, cwd: str | Path, script_names: Sequence[str]) -> None:
        run_scripts_concurrently(tool=self.tool, cwd=cwd, script_names=script_names)
