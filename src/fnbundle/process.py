"""Child process execution with full output capture."""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from fnbundle.errors import ProcessStartError, SpawnError


@dataclass(frozen=True, slots=True)
class ProcessOutput:
    stdout: str
    stderr: str


def spawn_process(
    command: str,
    args: Sequence[str],
    *,
    cwd: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> ProcessOutput:
    """Run *command* with *args* and return both captured streams.

    Output is captured without size limits. A non-zero exit raises
    :class:`SpawnError` carrying stdout and stderr; a binary that cannot be
    started raises :class:`ProcessStartError`.
    """
    argv = [command, *args]
    process_env: dict[str, str] | None = None
    if env is not None:
        process_env = dict(os.environ)
        process_env.update(env)

    try:
        result = subprocess.run(
            argv,
            cwd=str(cwd) if cwd is not None else None,
            env=process_env,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except (FileNotFoundError, PermissionError) as exc:
        raise ProcessStartError(
            f"Unable to start `{command}`.",
            hint=f"Install `{command}` and ensure it is available in PATH.",
            context={"command": " ".join(argv), "cwd": str(cwd or ""), "reason": str(exc)},
        ) from exc

    if result.returncode != 0:
        raise SpawnError(
            f"{command} {' '.join(args)} failed with code {result.returncode}",
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            returncode=result.returncode,
            context={"command": " ".join(argv), "cwd": str(cwd or "")},
        )
    return ProcessOutput(stdout=result.stdout or "", stderr=result.stderr or "")


__all__ = ["ProcessOutput", "spawn_process"]
