from __future__ import annotations

import io
import logging
import os
import re
from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from repo_summary.config import SelectionMode
from repo_summary.exceptions import WalkError
from repo_summary.ignore import IgnoreRuleSet
from repo_summary.output_construction import SummaryWriter
from repo_summary.selection import SelectionSpec
from repo_summary.walker import DirectoryListing, Visit, Walker, WalkEntry


def make_tree(root: Path, files: dict[str, bytes]) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)


def make_walker(root: Path, selection: SelectionSpec | None = None) -> Walker:
    return Walker(root, IgnoreRuleSet.load(root), selection or SelectionSpec())


@pytest.mark.unit
def test_decide_returns_tagged_visit(tmp_path: Path) -> None:
    walker = make_walker(tmp_path)

    assert walker.decide(WalkEntry(path=tmp_path / ".git", rel=".git", is_dir=True)) is Visit.SKIP_SUBTREE
    assert walker.decide(WalkEntry(path=tmp_path / ".gitignore", rel=".gitignore")) is Visit.SKIP_ENTRY
    assert walker.decide(WalkEntry(path=tmp_path / "src", rel="src", is_dir=True)) is Visit.DESCEND


@pytest.mark.unit
def test_iter_entries_is_depth_first_in_name_order(tmp_path: Path) -> None:
    make_tree(
        tmp_path,
        {
            "b.txt": b"b",
            "a/z.txt": b"z",
            "a/c/d.txt": b"d",
            "A.txt": b"A",
        },
    )

    rels = [e.rel for e in make_walker(tmp_path).iter_entries()]

    assert rels == ["A.txt", "a", "a/c", "a/c/d.txt", "a/z.txt", "b.txt"]


@pytest.mark.unit
def test_ignored_directory_is_pruned(tmp_path: Path) -> None:
    make_tree(
        tmp_path,
        {
            ".gitignore": b"build/\n",
            "build/out/x.txt": b"x",
            "node_modules/pkg/index.js": b"js",
            ".git/HEAD": b"ref",
            "src/app.py": b"app",
        },
    )
    walker = make_walker(tmp_path)

    rels = [e.rel for e in walker.iter_entries()]
    structure = walker.capture_structure()

    assert rels == ["src", "src/app.py"]
    assert structure == {
        "": DirectoryListing(directories=["src"]),
        "src": DirectoryListing(files=["app.py"]),
    }


@pytest.mark.unit
def test_capture_structure_lists_empty_directories(tmp_path: Path) -> None:
    (tmp_path / "empty").mkdir()
    make_tree(tmp_path, {"docs/readme.md": b"# hi", "top.txt": b"t"})

    structure = make_walker(tmp_path).capture_structure()

    assert list(structure) == ["", "docs", "empty"]
    assert structure[""].directories == ["docs", "empty"]
    assert structure[""].files == ["top.txt"]
    assert structure["empty"] == DirectoryListing()


@pytest.mark.unit
def test_run_skips_binary_and_unselected(tmp_path: Path) -> None:
    make_tree(
        tmp_path,
        {
            "src/main.go": b"package main\n",
            "src/logo.png": b"\x89PNG\x00\x00",
            "src/notes.go": b"\x00binary go?",
            "docs/readme.md": b"# readme",
        },
    )
    selection = SelectionSpec(mode=SelectionMode.REGEX, patterns=(re.compile(r"^src/"),))
    buf = io.BytesIO()

    report = make_walker(tmp_path, selection).run(SummaryWriter(buf, tmp_path / "out"))

    assert report.included == ["src/main.go"]
    assert report.binary == 2
    assert report.unselected == 1
    assert buf.getvalue() == b"### src/main.go\n```\npackage main\n\n```\n"


@pytest.mark.unit
def test_run_counts_ignored_files(tmp_path: Path) -> None:
    make_tree(tmp_path, {".gitignore": b"secret.txt\n", "secret.txt": b"s", "a.txt": b"hello"})

    report = make_walker(tmp_path).run(SummaryWriter(io.BytesIO(), tmp_path / "out"))

    assert report.included == ["a.txt"]
    assert report.ignored == 2  # .gitignore itself and secret.txt


@pytest.mark.unit
def test_run_warns_for_missing_listed_files(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    make_tree(tmp_path, {"a.txt": b"a", "node_modules/x.js": b"x"})
    selection = SelectionSpec(mode=SelectionMode.LIST, paths=("a.txt", "gone.txt", "node_modules/x.js"))
    caplog.set_level(logging.WARNING)

    report = make_walker(tmp_path, selection).run(SummaryWriter(io.BytesIO(), tmp_path / "out"))

    assert report.included == ["a.txt"]
    assert report.missing == ["gone.txt", "node_modules/x.js"]
    assert "listed file not found" in caplog.text
    assert "gone.txt" in caplog.text
    assert "listed file skipped by ignore rules" in caplog.text


@pytest.mark.unit
def test_list_selection_follows_traversal_order(tmp_path: Path) -> None:
    make_tree(tmp_path, {"a.txt": b"a", "b.txt": b"b", "src/c.txt": b"c"})
    selection = SelectionSpec(mode=SelectionMode.LIST, paths=("src/c.txt", "b.txt", "a.txt"))
    buf = io.BytesIO()

    report = make_walker(tmp_path, selection).run(SummaryWriter(buf, tmp_path / "out"))

    assert report.included == ["a.txt", "b.txt", "src/c.txt"]
    assert buf.getvalue().index(b"### a.txt") < buf.getvalue().index(b"### src/c.txt")


@pytest.mark.unit
def test_run_skips_file_that_fails_to_read(tmp_path: Path, mocker: MockerFixture) -> None:
    make_tree(tmp_path, {"a.txt": b"a", "b.txt": b"b"})
    mocker.patch("repo_summary.walker.read_file_bytes", side_effect=[None, b"b"])

    report = make_walker(tmp_path).run(SummaryWriter(io.BytesIO(), tmp_path / "out"))

    assert report.included == ["b.txt"]
    assert report.binary == 1


@pytest.mark.unit
def test_symlinked_directory_is_not_followed(tmp_path: Path) -> None:
    make_tree(tmp_path, {"real/a.txt": b"a"})
    os.symlink(tmp_path / "real", tmp_path / "link", target_is_directory=True)

    entries = list(make_walker(tmp_path).iter_entries())

    assert [(e.rel, e.is_dir) for e in entries] == [("link", False), ("real", True), ("real/a.txt", False)]


@pytest.mark.unit
def test_listing_failure_aborts_walk(tmp_path: Path, mocker: MockerFixture) -> None:
    make_tree(tmp_path, {"a/x.txt": b"x"})
    real_scandir = os.scandir

    def scandir(path: Path):  # noqa: ANN202
        if Path(path).name == "a":
            raise PermissionError("permission denied")
        return real_scandir(path)

    mocker.patch("repo_summary.walker.os.scandir", side_effect=scandir)

    with pytest.raises(WalkError) as exc_info:
        list(make_walker(tmp_path).iter_entries())

    assert exc_info.value.path == tmp_path / "a"
    assert "permission denied" in str(exc_info.value)
