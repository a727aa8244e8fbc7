"""Batched compilation of function entrypoints.

Functions that share a source file are compiled once: entries are
deduplicated, split into batches of at most ``concurrency`` files, and each
batch is handed to the compiler in a single call. Batches run one after the
other. Results are mapped back to every function that referenced a file.
"""

from __future__ import annotations

import json
import math
import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

from fnbundle.compiler import CompileOutput, Compiler
from fnbundle.config import ORCHESTRATOR_ONLY_KEYS, BuildConfiguration, validate_output_extension
from fnbundle.errors import BundleError, CompilerError
from fnbundle.models import FileBuildResult, FunctionBuildResult, FunctionEntry
from fnbundle.observability import StructuredLogger

T = TypeVar("T")

METAFILE_NAME = "meta.json"


@dataclass(slots=True)
class BatchBundler:
    compiler: Compiler
    build_dir: Path
    logger: StructuredLogger = field(default_factory=StructuredLogger)

    def bundle(
        self,
        entries: Sequence[FunctionEntry],
        config: BuildConfiguration,
    ) -> list[FunctionBuildResult]:
        extension = config.output_file_extension
        files = unique_entries(entries)

        if config.skip_bundle:
            self.logger.verbose(
                operation="bundle",
                message=f"Skipping compilation, reusing {len(files)} bundles in {self.build_dir}.",
            )
            return map_function_results(entries, _file_results(files, extension))

        self.logger.verbose(
            operation="bundle",
            message=f"Compiling to {config.target} bundle with {self.compiler.name}...",
        )
        options = build_compiler_options(config)
        validate_output_extension(config)

        batches = partition_batches(files, config.concurrency)
        self.logger.verbose(
            operation="bundle",
            message=f"Compiling {len(files)} entrypoints in {len(batches)} batches...",
            extra={"concurrency": config.concurrency or "unbounded"},
        )

        file_results: list[FileBuildResult] = []
        metafiles: list[dict[str, Any]] = []
        for index, batch in enumerate(batches, start=1):
            self.logger.verbose(
                operation="bundle",
                phase=f"batch-{index}",
                message=f"Compiling batch {index}/{len(batches)} ({len(batch)} entrypoints).",
            )
            output = self._compile(options, batch)
            if output.metafile is not None:
                metafiles.append(output.metafile)
            file_results.extend(_file_results(batch, extension, result=output))

        if config.metafile and metafiles:
            _write_metafile(self.build_dir / METAFILE_NAME, metafiles)

        results = map_function_results(entries, file_results)
        self.logger.verbose(operation="bundle", message="Compiling completed.")
        return results

    def _compile(self, options: dict[str, Any], batch: list[str]) -> CompileOutput:
        call_options = {
            **options,
            "entryPoints": list(batch),
            "outdir": str(self.build_dir),
            "outbase": ".",
        }
        try:
            return self.compiler.build(call_options)
        except BundleError:
            raise
        except Exception as exc:
            raise CompilerError(
                f"{self.compiler.name} build failed.",
                hint="Check the compiler output and build configuration.",
                context={"entryPoints": ", ".join(batch), "reason": str(exc)},
            ) from exc


def build_compiler_options(config: BuildConfiguration) -> dict[str, Any]:
    """Options passed to every compiler call, without orchestrator-only keys."""
    options = {
        key: value
        for key, value in config.compiler_options.items()
        if key not in ORCHESTRATOR_ONLY_KEYS
    }
    options["external"] = config.compiler_externals()
    if config.output_file_extension != ".js":
        options["outExtension"] = {".js": config.output_file_extension}
    return options


def unique_entries(entries: Iterable[FunctionEntry]) -> list[str]:
    return list(dict.fromkeys(entry.entry for entry in entries))


def partition_batches(items: Sequence[T], concurrency: int | float | None) -> list[list[T]]:
    """Split *items* into consecutive batches of at most *concurrency* items.

    ``None`` or infinity yields a single batch.
    """
    if not items:
        return []
    if concurrency is None or math.isinf(concurrency):
        return [list(items)]
    size = int(concurrency)
    if size < 1:
        raise ValueError("concurrency must be at least 1")
    return [list(items[start : start + size]) for start in range(0, len(items), size)]


def bundle_path_for(entry: str, extension: str) -> str:
    return os.path.splitext(entry)[0] + extension


def map_function_results(
    entries: Iterable[FunctionEntry],
    file_results: Iterable[FileBuildResult],
) -> list[FunctionBuildResult]:
    """Resolve each function to its bundle.

    Functions whose file was not built, or that carry no function handle, are
    left out.
    """
    build_cache = {file_result.entry: file_result for file_result in file_results}
    results: list[FunctionBuildResult] = []
    for entry in entries:
        file_result = build_cache.get(entry.entry)
        if file_result is None or entry.function is None:
            continue
        results.append(
            FunctionBuildResult(
                bundle_path=file_result.bundle_path,
                function=entry.function,
                alias=entry.alias,
            ),
        )
    return results


def _file_results(
    files: Iterable[str],
    extension: str,
    *,
    result: CompileOutput | None = None,
) -> list[FileBuildResult]:
    return [
        FileBuildResult(bundle_path=bundle_path_for(entry, extension), entry=entry, result=result)
        for entry in files
    ]


def _write_metafile(path: Path, metafiles: list[dict[str, Any]]) -> None:
    if len(metafiles) == 1:
        payload = metafiles[0]
    else:
        payload = {"inputs": {}, "outputs": {}}
        for metafile in metafiles:
            payload["inputs"].update(metafile.get("inputs", {}))
            payload["outputs"].update(metafile.get("outputs", {}))
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


__all__ = [
    "BatchBundler",
    "build_compiler_options",
    "bundle_path_for",
    "map_function_results",
    "partition_batches",
    "unique_entries",
]
