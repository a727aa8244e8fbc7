"""Core typed dataclasses for function entries, build results and archives."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass(frozen=True, slots=True)
class FunctionEntry:
    """One deployable function and the source file that exports its handler.

    ``function`` is the host's function definition, carried through untouched.
    Several entries may share one ``entry``.
    """

    entry: str
    function: Any
    alias: str


@dataclass(frozen=True, slots=True)
class FileBuildResult:
    bundle_path: str
    entry: str
    result: Any = None


@dataclass(frozen=True, slots=True)
class FunctionBuildResult:
    bundle_path: str
    function: Any
    alias: str


@dataclass(frozen=True, slots=True)
class DependencyInfo:
    version: str


@dataclass(frozen=True, slots=True)
class DependenciesResult:
    dependencies: dict[str, DependencyInfo] = field(default_factory=dict)

    def versions(self) -> dict[str, str]:
        return {name: info.version for name, info in sorted(self.dependencies.items())}


@dataclass(frozen=True, slots=True)
class ArchiveFile:
    """A file to place in an archive.

    ``root_path`` is where the bytes live on disk, ``local_path`` is the entry
    name inside the archive.
    """

    root_path: Path
    local_path: str

    @classmethod
    def of(cls, root_path: str | Path, local_path: str) -> ArchiveFile:
        return cls(root_path=Path(root_path), local_path=local_path)


__all__ = [
    "ArchiveFile",
    "DependenciesResult",
    "DependencyInfo",
    "FileBuildResult",
    "FunctionBuildResult",
    "FunctionEntry",
]
