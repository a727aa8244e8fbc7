import math

import pytest

from fnbundle.config import (
    ORCHESTRATOR_ONLY_KEYS,
    BuildConfiguration,
    ExternalPackage,
    is_esm,
    parse_external,
)
from fnbundle.errors import ConfigurationError


def test_defaults_apply_when_options_are_empty() -> None:
    config = BuildConfiguration.from_mapping({})

    assert config.target == "node18"
    assert config.platform == "node"
    assert config.format is None
    assert config.output_file_extension == ".js"
    assert config.concurrency is None
    assert config.exclude == ("aws-sdk",)
    assert config.packager == "npm"
    assert config.skip_bundle is False
    assert dict(config.compiler_options) == {
        "bundle": True,
        "target": "node18",
        "external": [],
        "platform": "node",
    }


def test_orchestrator_only_keys_never_reach_compiler_options() -> None:
    raw = {key: None for key in ORCHESTRATOR_ONLY_KEYS}
    raw.update(
        {
            "outputFileExtension": ".js",
            "packager": "bun",
            "minify": True,
            "sourcemap": "linked",
            "mainFields": ["module", "main"],
        },
    )

    config = BuildConfiguration.from_mapping(raw)

    assert not set(config.compiler_options) & set(ORCHESTRATOR_ONLY_KEYS)
    assert config.compiler_options["minify"] is True
    assert config.compiler_options["sourcemap"] == "linked"
    assert config.compiler_options["mainFields"] == ["module", "main"]


def test_infinite_concurrency_means_unbounded() -> None:
    config = BuildConfiguration.from_mapping({"concurrency": math.inf, "zipConcurrency": 4})

    assert config.concurrency is None
    assert config.zip_concurrency == 4


@pytest.mark.parametrize("value", [0, -3, 1.5, "2", True])
def test_invalid_concurrency_is_rejected(value: object) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        BuildConfiguration.from_mapping({"concurrency": value})

    assert "concurrency" in str(excinfo.value)


def test_extension_must_start_with_dot() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        BuildConfiguration.from_mapping({"outputFileExtension": "cjs"})

    assert excinfo.value.hint is not None


def test_non_boolean_flag_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        BuildConfiguration.from_mapping({"skipBundle": "yes"})


def test_external_declarations_are_normalized() -> None:
    packages = parse_external(
        [
            "lodash",
            {"sharp": {"postinstall": "npm rebuild sharp"}, "canvas": None},
            42,
        ],
    )

    assert packages == (
        ExternalPackage(name="lodash"),
        ExternalPackage(name="sharp", directives={"postinstall": "npm rebuild sharp"}),
        ExternalPackage(name="canvas"),
    )
    assert parse_external("single") == (ExternalPackage(name="single"),)
    assert parse_external(None) == ()


def test_exclude_accepts_single_string_and_drops_non_strings() -> None:
    config = BuildConfiguration.from_mapping({"exclude": "aws-sdk"})
    mixed = BuildConfiguration.from_mapping({"exclude": ["aws-sdk", 3, None]})

    assert config.exclude == ("aws-sdk",)
    assert mixed.exclude == ("aws-sdk",)


@pytest.mark.parametrize(
    ("format", "platform", "expected"),
    [
        ("esm", "node", True),
        (None, "neutral", True),
        ("cjs", "neutral", False),
        (None, "node", False),
        ("iife", "browser", False),
    ],
)
def test_is_esm(format: str | None, platform: str, expected: bool) -> None:
    assert is_esm(format=format, platform=platform) is expected


def test_metafile_option_must_be_boolean() -> None:
    assert BuildConfiguration.from_mapping({"metafile": True}).metafile is True
    assert BuildConfiguration.from_mapping({}).metafile is False

    with pytest.raises(ConfigurationError) as excinfo:
        BuildConfiguration.from_mapping({"metafile": "no"})

    assert "metafile" in str(excinfo.value)
