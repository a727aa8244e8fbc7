"""esbuild invoked through its command line interface.

Build options use esbuild's JavaScript API names (``entryPoints``,
``outExtension``, ...) and are translated to CLI flags here.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from fnbundle.compiler.base import CompileOutput
from fnbundle.errors import CompilerError
from fnbundle.process import spawn_process
from fnbundle.scope import temp_path_scope

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

# Options whose value is a mapping, rendered as `--flag:key=value`.
_KEYED_FLAGS = {
    "outExtension": "out-extension",
    "loader": "loader",
    "define": "define",
    "banner": "banner",
    "footer": "footer",
}


@dataclass(slots=True)
class EsbuildCompiler:
    name: str = "esbuild"
    tool: str = "esbuild"

    def build(self, options: Mapping[str, Any]) -> CompileOutput:
        entry_points = [str(entry) for entry in options.get("entryPoints", ())]
        if not entry_points:
            raise CompilerError("esbuild requires at least one entry point.")

        flags = esbuild_flags(options)
        if not options.get("metafile"):
            output = spawn_process(self.tool, [*entry_points, *flags])
            return CompileOutput(raw=output)

        with temp_path_scope("esbuild-meta") as temp_dir:
            metafile_path = temp_dir / "meta.json"
            output = spawn_process(self.tool, [*entry_points, *flags, f"--metafile={metafile_path}"])
            metafile = _read_metafile(metafile_path)
        outputs = metafile.get("outputs", {})
        return CompileOutput(
            output_files=tuple(sorted(outputs)) if isinstance(outputs, dict) else (),
            metafile=metafile,
            raw=output,
        )


def esbuild_flags(options: Mapping[str, Any]) -> list[str]:
    flags: list[str] = []
    for key, value in options.items():
        if key in ("entryPoints", "metafile") or value is None:
            continue
        if key == "external":
            flags.extend(f"--external:{name}" for name in value)
            continue
        if key in _KEYED_FLAGS:
            if not isinstance(value, Mapping):
                raise CompilerError(f"esbuild option `{key}` must be a mapping.", context={key: repr(value)})
            flags.extend(f"--{_KEYED_FLAGS[key]}:{k}={v}" for k, v in value.items())
            continue

        flag = _CAMEL_BOUNDARY.sub("-", key).lower()
        if isinstance(value, bool):
            if value:
                flags.append(f"--{flag}")
        elif isinstance(value, (str, int, float)):
            flags.append(f"--{flag}={value}")
        elif isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value):
            flags.append(f"--{flag}={','.join(value)}")
        else:
            raise CompilerError(
                f"esbuild option `{key}` cannot be passed on the command line.",
                hint="Remove the option or use a compiler that accepts structured options.",
                context={key: repr(value)},
            )
    return flags


def _read_metafile(path: Path) -> dict[str, Any]:
    try:
        parsed = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise CompilerError(
            "esbuild metafile is missing or not valid JSON.",
            context={"path": str(path), "reason": str(exc)},
        ) from exc
    if not isinstance(parsed, dict):
        raise CompilerError("esbuild metafile has invalid structure.", context={"path": str(path)})
    return parsed
