"""Build configuration parsing and validation.

Options arrive as the host's raw mapping (camelCase keys). Anything that is
not an orchestrator option is forwarded verbatim to the compiler, so the
orchestrator-only keys are listed here once and stripped in one place.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from fnbundle.errors import ConfigurationError

ORCHESTRATOR_ONLY_KEYS: tuple[str, ...] = (
    "concurrency",
    "zipConcurrency",
    "exclude",
    "nativeZip",
    "packager",
    "packagePath",
    "watch",
    "keepOutputDirectory",
    "packagerOptions",
    "installExtraArgs",
    "installDeps",
    "outputFileExtension",
    "outputBuildFolder",
    "outputWorkFolder",
    "nodeExternals",
    "skipBuild",
    "skipBundle",
    "skipRebuild",
    "skipBuildExcludeFns",
    "stripEntryResolveExtensions",
    "disposeContext",
)

DEFAULT_OPTIONS: Mapping[str, Any] = {
    "bundle": True,
    "target": "node18",
    "external": [],
    "exclude": ["aws-sdk"],
    "nativeZip": False,
    "packager": "npm",
    "installExtraArgs": [],
    "watch": {},
    "keepOutputDirectory": False,
    "packagerOptions": {},
    "platform": "node",
    "outputFileExtension": ".js",
}

EXCLUDE_ALL = "*"


@dataclass(frozen=True, slots=True)
class ExternalPackage:
    """A package left out of the bundle, optionally with install directives.

    Declared either as a plain name or as ``{name: {"postinstall": ...}}``.
    """

    name: str
    directives: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class BuildConfiguration:
    target: str = "node18"
    platform: str = "node"
    format: str | None = None
    output_file_extension: str = ".js"
    concurrency: int | None = None
    zip_concurrency: int | None = None
    exclude: tuple[str, ...] = ("aws-sdk",)
    external: tuple[ExternalPackage, ...] = ()
    native_zip: bool = False
    packager: str = "npm"
    install_extra_args: tuple[str, ...] = ()
    skip_bundle: bool = False
    keep_output_directory: bool = False
    metafile: bool = False
    compiler_options: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None = None) -> BuildConfiguration:
        merged: dict[str, Any] = {**DEFAULT_OPTIONS, **(raw or {})}
        compiler_options = {
            key: value for key, value in merged.items() if key not in ORCHESTRATOR_ONLY_KEYS
        }
        return cls(
            target=_required_str(merged, "target"),
            platform=_required_str(merged, "platform"),
            format=_optional_str(merged, "format"),
            output_file_extension=_extension(merged, "outputFileExtension"),
            concurrency=_concurrency(merged, "concurrency"),
            zip_concurrency=_concurrency(merged, "zipConcurrency"),
            exclude=_string_list(merged.get("exclude")),
            external=parse_external(merged.get("external")),
            native_zip=_flag(merged, "nativeZip"),
            packager=_required_str(merged, "packager"),
            install_extra_args=_string_list(merged.get("installExtraArgs")),
            skip_bundle=_flag(merged, "skipBundle"),
            keep_output_directory=_flag(merged, "keepOutputDirectory"),
            metafile=_flag(merged, "metafile"),
            compiler_options=compiler_options,
        )

    def external_names(self) -> tuple[str, ...]:
        return tuple(package.name for package in self.external)

    def compiler_externals(self) -> list[str]:
        """External list sent to the compiler: declared externals plus excludes.

        A ``"*"`` exclude means every dependency is left to the packager, so the
        exclude list contributes nothing here.
        """
        excluded = [] if EXCLUDE_ALL in self.exclude else list(self.exclude)
        return [*self.external_names(), *excluded]

    @property
    def is_esm(self) -> bool:
        return is_esm(format=self.format, platform=self.platform)


def is_esm(*, format: str | None, platform: str | None) -> bool:
    return format == "esm" or (platform == "neutral" and not format)


def validate_output_extension(config: BuildConfiguration) -> None:
    if config.is_esm and config.output_file_extension == ".cjs":
        raise ConfigurationError(
            'ERROR: format "esm" or platform "neutral" should not output a file with extension ".cjs".',
            hint='Use ".js" or ".mjs" for ES module output.',
            context={"format": config.format or "", "platform": config.platform},
        )
    if not config.is_esm and config.output_file_extension == ".mjs":
        raise ConfigurationError(
            'ERROR: Non esm builds should not output a file with extension ".mjs".',
            hint='Set format "esm" or use ".js"/".cjs".',
            context={"format": config.format or "", "platform": config.platform},
        )


def parse_external(raw: Any) -> tuple[ExternalPackage, ...]:
    """Normalize plain-name and object-form external declarations."""
    packages: list[ExternalPackage] = []
    for item in _as_list(raw):
        if isinstance(item, str):
            packages.append(ExternalPackage(name=item))
        elif isinstance(item, Mapping):
            for name, directives in item.items():
                packages.append(
                    ExternalPackage(
                        name=str(name),
                        directives=dict(directives) if isinstance(directives, Mapping) else {},
                    ),
                )
    return tuple(packages)


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _string_list(value: Any) -> tuple[str, ...]:
    return tuple(item for item in _as_list(value) if isinstance(item, str))


def _required_str(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"Invalid build option `{key}` value.", context={key: repr(value)})
    return value


def _optional_str(payload: Mapping[str, Any], key: str) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"Invalid build option `{key}` value.", context={key: repr(value)})
    return value


def _flag(payload: Mapping[str, Any], key: str) -> bool:
    value = payload.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ConfigurationError(f"Build option `{key}` must be a boolean.", context={key: repr(value)})
    return value


def _extension(payload: Mapping[str, Any], key: str) -> str:
    value = _required_str(payload, key)
    if not value.startswith("."):
        raise ConfigurationError(
            f"Build option `{key}` must start with a dot.",
            hint='Use a value such as ".js", ".cjs" or ".mjs".',
            context={key: value},
        )
    return value


def _concurrency(payload: Mapping[str, Any], key: str) -> int | None:
    value = payload.get(key)
    if value is None:
        return None
    if isinstance(value, float) and math.isinf(value) and value > 0:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigurationError(
            f"Build option `{key}` must be a positive integer.",
            context={key: repr(value)},
        )
    return value


__all__ = [
    "BuildConfiguration",
    "DEFAULT_OPTIONS",
    "EXCLUDE_ALL",
    "ExternalPackage",
    "ORCHESTRATOR_ONLY_KEYS",
    "is_esm",
    "parse_external",
    "validate_output_extension",
]
