import json
import math
from pathlib import Path
from typing import Any

import pytest

from fnbundle.bundle import BatchBundler, bundle_path_for, partition_batches, unique_entries
from fnbundle.config import BuildConfiguration
from fnbundle.errors import CompilerError, ConfigurationError, SpawnError
from fnbundle.models import FunctionBuildResult, FunctionEntry

BUILD_DIR = Path("/workdir/.esbuild")


def test_shared_entry_is_compiled_once(recording_compiler: Any) -> None:
    entries = [
        _entry("file1.ts", "func1", handler="file1.handler"),
        _entry("file1.ts", "func2", handler="file1.handler2"),
    ]

    results = _bundler(recording_compiler).bundle(entries, _config())

    assert len(recording_compiler.calls) == 1
    assert recording_compiler.calls[0]["entryPoints"] == ["file1.ts"]
    assert [result.alias for result in results] == ["func1", "func2"]
    assert {result.bundle_path for result in results} == {"file1.js"}


def test_distinct_entries_share_one_call_when_unbounded(recording_compiler: Any) -> None:
    entries = [_entry("a.ts", "f1"), _entry("b.ts", "f2")]

    results = _bundler(recording_compiler).bundle(entries, _config(concurrency=math.inf))

    assert len(recording_compiler.calls) == 1
    assert recording_compiler.calls[0]["entryPoints"] == ["a.ts", "b.ts"]
    assert results == [
        FunctionBuildResult(bundle_path="a.js", function=entries[0].function, alias="f1"),
        FunctionBuildResult(bundle_path="b.js", function=entries[1].function, alias="f2"),
    ]


def test_compiler_receives_only_compiler_options(recording_compiler: Any) -> None:
    _bundler(recording_compiler).bundle([_entry("file1.ts", "func1")], _config())

    assert recording_compiler.calls[0] == {
        "bundle": True,
        "entryPoints": ["file1.ts"],
        "external": ["aws-sdk"],
        "outbase": ".",
        "outdir": str(BUILD_DIR),
        "platform": "node",
        "target": "node12",
    }


def test_batches_follow_concurrency_limit(recording_compiler: Any) -> None:
    entries = [_entry("a.ts", "f1"), _entry("b.ts", "f2"), _entry("c.ts", "f3")]

    results = _bundler(recording_compiler).bundle(entries, _config(concurrency=2))

    assert [call["entryPoints"] for call in recording_compiler.calls] == [["a.ts", "b.ts"], ["c.ts"]]
    assert [result.bundle_path for result in results] == ["a.js", "b.js", "c.js"]


@pytest.mark.parametrize(
    ("unique_count", "concurrency", "expected_calls"),
    [
        (1, 1, 1),
        (4, 1, 4),
        (5, 2, 3),
        (6, 3, 2),
        (3, 5, 1),
        (7, math.inf, 1),
    ],
)
def test_number_of_compiler_calls_is_ceil_of_unique_over_concurrency(
    recording_compiler: Any,
    unique_count: int,
    concurrency: float,
    expected_calls: int,
) -> None:
    entries = [_entry(f"src/handler{i}.ts", f"fn{i}") for i in range(unique_count)]
    # duplicates never add calls
    entries += [_entry("src/handler0.ts", "fn-dup")]

    _bundler(recording_compiler).bundle(entries, _config(concurrency=concurrency))

    assert len(recording_compiler.calls) == expected_calls
    flattened = [entry for call in recording_compiler.calls for entry in call["entryPoints"]]
    assert flattened == [f"src/handler{i}.ts" for i in range(unique_count)]


def test_skip_bundle_maps_results_without_compiling(recording_compiler: Any) -> None:
    entries = [_entry("file1.ts", "func1"), _entry("file2.ts", "func2")]

    skipped = _bundler(recording_compiler).bundle(entries, _config(skipBundle=True))
    built = _bundler(recording_compiler).bundle(entries, _config())

    assert len(recording_compiler.calls) == 1
    assert skipped == built
    assert [result.bundle_path for result in skipped] == ["file1.js", "file2.js"]


def test_cjs_extension_is_applied_to_bundle_paths(recording_compiler: Any) -> None:
    entries = [_entry("file1.ts", "func1"), _entry("nested/file2.ts", "func2")]

    results = _bundler(recording_compiler).bundle(entries, _config(outputFileExtension=".cjs"))

    assert [result.bundle_path for result in results] == ["file1.cjs", "nested/file2.cjs"]
    assert recording_compiler.calls[0]["outExtension"] == {".js": ".cjs"}


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        (
            {"platform": "node", "outputFileExtension": ".mjs"},
            'ERROR: Non esm builds should not output a file with extension ".mjs".',
        ),
        (
            {"platform": "neutral", "outputFileExtension": ".cjs"},
            'ERROR: format "esm" or platform "neutral" should not output a file with extension ".cjs".',
        ),
        (
            {"format": "esm", "outputFileExtension": ".cjs"},
            'ERROR: format "esm" or platform "neutral" should not output a file with extension ".cjs".',
        ),
        (
            {"platform": "neutral", "format": "cjs", "outputFileExtension": ".mjs"},
            'ERROR: Non esm builds should not output a file with extension ".mjs".',
        ),
    ],
)
def test_incompatible_extension_fails_before_compiling(
    recording_compiler: Any,
    overrides: dict[str, Any],
    message: str,
) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        _bundler(recording_compiler).bundle([_entry("file1.ts", "func1")], _config(**overrides))

    assert str(excinfo.value).startswith(message)
    assert excinfo.value.code == "E_CONFIGURATION"
    assert recording_compiler.calls == []


@pytest.mark.parametrize(
    ("overrides", "expected_path"),
    [
        ({"platform": "neutral", "outputFileExtension": ".js"}, "file1.js"),
        ({"platform": "neutral", "outputFileExtension": ".mjs"}, "file1.mjs"),
        ({"format": "esm", "outputFileExtension": ".mjs"}, "file1.mjs"),
        ({"platform": "node", "outputFileExtension": ".cjs"}, "file1.cjs"),
    ],
)
def test_compatible_extensions_reach_the_compiler(
    recording_compiler: Any,
    overrides: dict[str, Any],
    expected_path: str,
) -> None:
    results = _bundler(recording_compiler).bundle([_entry("file1.ts", "func1")], _config(**overrides))

    assert len(recording_compiler.calls) == 1
    assert results[0].bundle_path == expected_path


def test_entries_without_function_handle_are_dropped(recording_compiler: Any) -> None:
    entries = [
        _entry("file1.ts", "func1"),
        FunctionEntry(entry="file2.ts", function=None, alias="disabled"),
    ]

    results = _bundler(recording_compiler).bundle(entries, _config())

    assert recording_compiler.calls[0]["entryPoints"] == ["file1.ts", "file2.ts"]
    assert [result.alias for result in results] == ["func1"]


def test_failed_batch_aborts_remaining_batches(recording_compiler: Any) -> None:
    recording_compiler.fail_on_call = 1
    entries = [_entry("a.ts", "f1"), _entry("b.ts", "f2")]

    with pytest.raises(CompilerError) as excinfo:
        _bundler(recording_compiler).bundle(entries, _config(concurrency=1))

    assert len(recording_compiler.calls) == 1
    assert "Build failed with 1 error" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_typed_compiler_errors_propagate_unchanged(tmp_path: Path) -> None:
    class FailingCompiler:
        name = "failing"

        def build(self, options: Any) -> Any:
            raise SpawnError("esbuild failed", stdout="", stderr="x", returncode=1)

    bundler = BatchBundler(compiler=FailingCompiler(), build_dir=tmp_path)

    with pytest.raises(SpawnError):
        bundler.bundle([_entry("a.ts", "f1")], _config())


def test_external_object_form_and_exclude_are_merged(recording_compiler: Any) -> None:
    config = _config(
        external=["lodash", {"sharp": {"postinstall": "npm rebuild sharp"}}],
        exclude=["aws-sdk", "@aws-sdk/client-s3"],
    )

    _bundler(recording_compiler).bundle([_entry("a.ts", "f1")], config)

    assert recording_compiler.calls[0]["external"] == [
        "lodash",
        "sharp",
        "aws-sdk",
        "@aws-sdk/client-s3",
    ]


def test_wildcard_exclude_keeps_only_declared_externals(recording_compiler: Any) -> None:
    config = _config(external=["sharp"], exclude=["*"])

    _bundler(recording_compiler).bundle([_entry("a.ts", "f1")], config)

    assert recording_compiler.calls[0]["external"] == ["sharp"]


def test_metafile_is_written_to_build_dir(tmp_path: Path, recording_compiler: Any) -> None:
    recording_compiler.metafile = {"inputs": {"a.ts": {"bytes": 10}}, "outputs": {"a.js": {"bytes": 20}}}
    bundler = BatchBundler(compiler=recording_compiler, build_dir=tmp_path / ".esbuild")

    bundler.bundle([_entry("a.ts", "f1")], _config(metafile=True))

    meta = json.loads((tmp_path / ".esbuild" / "meta.json").read_text(encoding="utf-8"))
    assert meta == recording_compiler.metafile
    assert recording_compiler.calls[0]["metafile"] is True


def test_bundle_logs_progress(recording_compiler: Any) -> None:
    bundler = _bundler(recording_compiler)

    bundler.bundle([_entry("a.ts", "f1")], _config())

    messages = [record["message"] for record in bundler.logger.records_for_operation("bundle")]
    assert messages[0] == "Compiling to node12 bundle with recording..."
    assert messages[-1] == "Compiling completed."


def test_helpers() -> None:
    entries = [_entry("b.ts", "1"), _entry("a.ts", "2"), _entry("b.ts", "3")]

    assert unique_entries(entries) == ["b.ts", "a.ts"]
    assert partition_batches([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]
    assert partition_batches([1, 2], None) == [[1, 2]]
    assert partition_batches([], 3) == []
    assert bundle_path_for("src/handlers/user.ts", ".mjs") == "src/handlers/user.mjs"
    assert bundle_path_for("dir.v2/index.tsx", ".js") == "dir.v2/index.js"


def _bundler(compiler: Any) -> BatchBundler:
    return BatchBundler(compiler=compiler, build_dir=BUILD_DIR)


def _entry(path: str, alias: str, *, handler: str | None = None) -> FunctionEntry:
    default_handler = f"{path.rsplit('.', 1)[0]}.handler"
    return FunctionEntry(
        entry=path,
        function={"events": [], "handler": handler or default_handler},
        alias=alias,
    )


def _config(**overrides: Any) -> BuildConfiguration:
    options: dict[str, Any] = {
        "concurrency": math.inf,
        "bundle": True,
        "target": "node12",
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
    options.update(overrides)
    return BuildConfiguration.from_mapping(options)
