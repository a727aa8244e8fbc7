"""Compiler contract consumed by the batch bundler."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True, slots=True)
class CompileOutput:
    output_files: tuple[str, ...] = ()
    metafile: dict[str, Any] | None = None
    raw: Any = None


class Compiler(Protocol):
    name: str

    def build(self, options: Mapping[str, Any]) -> CompileOutput:
        """Compile ``options["entryPoints"]`` into ``options["outdir"]``."""
