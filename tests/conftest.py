"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import pytest

from fnbundle.compiler import CompileOutput


@dataclass(slots=True)
class RecordingCompiler:
    """Compiler stand-in that records every call it receives."""

    name: str = "recording"
    calls: list[dict[str, Any]] = field(default_factory=list)
    metafile: dict[str, Any] | None = None
    fail_on_call: int | None = None

    def build(self, options: Mapping[str, Any]) -> CompileOutput:
        self.calls.append(dict(options))
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise RuntimeError("Build failed with 1 error")
        return CompileOutput(metafile=self.metafile, raw={"entryPoints": list(options["entryPoints"])})


@pytest.fixture
def recording_compiler() -> RecordingCompiler:
    return RecordingCompiler()
