"""Package manager abstractions.

Each variant is a stateless implementation of :class:`Packager`, selected by
the ``packager`` build option through :func:`get_packager`.
"""

from __future__ import annotations

from fnbundle.errors import ConfigurationError

from .base import LockfileContent, Packager
from .bun import BunPackager
from .dependencies import read_prod_dependencies
from .npm import NpmPackager
from .pnpm import PnpmPackager
from .yarn import YarnPackager

_PACKAGERS: dict[str, type[Packager]] = {
    "bun": BunPackager,
    "npm": NpmPackager,
    "pnpm": PnpmPackager,
    "yarn": YarnPackager,
}


def get_packager(name: str) -> Packager:
    packager_type = _PACKAGERS.get(name)
    if packager_type is None:
        raise ConfigurationError(
            f"Unsupported packager `{name}`.",
            hint=f"Choose one of: {', '.join(sorted(_PACKAGERS))}.",
            context={"packager": name},
        )
    return packager_type()


__all__ = [
    "BunPackager",
    "LockfileContent",
    "NpmPackager",
    "Packager",
    "PnpmPackager",
    "YarnPackager",
    "get_packager",
    "read_prod_dependencies",
]
