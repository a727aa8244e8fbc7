"""Production dependency extraction from a package manifest."""

from __future__ import annotations

import json
from pathlib import Path

from fnbundle.models import DependenciesResult, DependencyInfo

MANIFEST_NAME = "package.json"


def read_prod_dependencies(cwd: str | Path) -> DependenciesResult:
    """Return the ``dependencies`` section of the manifest at *cwd*.

    A missing or unreadable manifest yields an empty result.
    """
    manifest_path = Path(cwd) / MANIFEST_NAME
    try:
        payload = json.loads(manifest_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return DependenciesResult()

    if not isinstance(payload, dict):
        return DependenciesResult()
    section = payload.get("dependencies") or {}
    if not isinstance(section, dict):
        return DependenciesResult()

    dependencies: dict[str, DependencyInfo] = {}
    for name, version in section.items():
        if isinstance(name, str) and isinstance(version, str):
            dependencies[name] = DependencyInfo(version=version)
    return DependenciesResult(dependencies=dependencies)
