from pathlib import Path

import pytest

from fnbundle.utils import find_project_root, find_up, human_size, trim_extension


def test_find_up_returns_closest_matching_directory(tmp_path: Path) -> None:
    (tmp_path / "yarn.lock").write_text("", encoding="utf-8")
    nested = tmp_path / "packages" / "api"
    nested.mkdir(parents=True)
    (tmp_path / "packages" / "package-lock.json").write_text("{}", encoding="utf-8")

    assert find_up("yarn.lock", nested) == tmp_path.resolve()
    assert find_up(["yarn.lock", "package-lock.json"], nested) == (tmp_path / "packages").resolve()
    assert find_up("no-such-marker-file.lock", nested) is None


def test_project_root_prefers_explicit_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    project = tmp_path / "project"
    (project / "src").mkdir(parents=True)
    (project / "pnpm-lock.yaml").write_text("", encoding="utf-8")
    monkeypatch.chdir(project / "src")

    assert find_project_root("/explicit/root") == Path("/explicit/root")
    assert find_project_root() == project.resolve()


@pytest.mark.parametrize(
    ("size", "expected"),
    [(0, "0.00 B"), (512, "512.00 B"), (1024, "1.00 KB"), (1536, "1.50 KB"), (5 * 1024**2, "5.00 MB")],
)
def test_human_size(size: int, expected: str) -> None:
    assert human_size(size) == expected


@pytest.mark.parametrize(
    ("entry", "expected"),
    [("src/handler.ts", "src/handler"), ("index.mjs", "index"), ("dir.v2/file", "dir.v2/file")],
)
def test_trim_extension(entry: str, expected: str) -> None:
    assert trim_extension(entry) == expected
