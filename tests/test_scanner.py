# tests/test_scanner.py
import os
from pathlib import Path

import pytest

from batchsplit.config import parse_extensions
from batchsplit.core.ignore import IgnoreFilter, load_ignore_spec
from batchsplit.core.scanner import TreeScanner, scan_tree
from batchsplit.errors import RunCancelled

ALL = {"*"}


@pytest.fixture
def wedding_project(tmp_path):
    """
    input/
      Wedding/
        Photos - Regular/IMG1.jpg
        Notes.txt
        foo.DS_Store.bak      (OS metadata variant)
      top.jpg
      .DS_Store, Thumbs.db    (system files)
      .hidden/x.jpg           (hidden directory)
    """
    root = tmp_path / "input"
    photos = root / "Wedding" / "Photos - Regular"
    photos.mkdir(parents=True)
    (photos / "IMG1.jpg").write_bytes(b"x" * 10)
    (root / "Wedding" / "Notes.txt").write_text("notes", encoding="utf-8")
    (root / "Wedding" / "foo.DS_Store.bak").write_bytes(b"junk")
    (root / "top.jpg").write_bytes(b"y" * 3)
    (root / ".DS_Store").write_bytes(b"junk")
    (root / "Thumbs.db").write_bytes(b"junk")
    (root / ".hidden").mkdir()
    (root / ".hidden" / "x.jpg").write_bytes(b"z")
    return root


def rel_paths(report):
    return {f.relative_path for f in report.files}


# --- Filtering ---

def test_scan_without_rename(wedding_project):
    report = scan_tree(wedding_project, ALL)

    assert rel_paths(report) == {
        "Wedding/Photos - Regular/IMG1.jpg",
        "Wedding/Notes.txt",
        "top.jpg",
    }
    assert report.renamed == 0
    assert not report.errors

    by_rel = {f.relative_path: f for f in report.files}
    img = by_rel["Wedding/Photos - Regular/IMG1.jpg"]
    assert img.size == 10
    assert img.display_name == "IMG1.jpg"
    assert img.absolute_path == wedding_project / "Wedding" / "Photos - Regular" / "IMG1.jpg"


def test_ignored_entries_are_recorded_with_reason(wedding_project):
    report = scan_tree(wedding_project, ALL)
    reasons = {p.path.name: p.reason for p in report.ignored}

    assert reasons[".DS_Store"] == "system file"
    assert reasons["Thumbs.db"] == "system file"
    assert reasons["foo.DS_Store.bak"] == "system file"
    assert reasons[".hidden"] == "hidden"
    # Nothing below a skipped directory is visited
    assert "x.jpg" not in reasons


def test_extension_allow_list(wedding_project):
    (wedding_project / "UPPER.JPG").write_bytes(b"u")
    report = scan_tree(wedding_project, parse_extensions("jpg"))

    assert rel_paths(report) == {"Wedding/Photos - Regular/IMG1.jpg", "top.jpg", "UPPER.JPG"}
    skipped = [p for p in report.ignored if p.reason == "extension not allowed"]
    assert [p.path.name for p in skipped] == ["Notes.txt"]


def test_batchignore_patterns(wedding_project):
    spec = load_ignore_spec(None, extra_patterns=["*.txt", "Wedding/Photos - Regular/"])
    report = scan_tree(wedding_project, ALL, ignore_filter=IgnoreFilter(spec=spec))

    assert rel_paths(report) == {"top.jpg"}
    assert sum(1 for p in report.ignored if p.reason == "ignore pattern") == 2


def test_load_ignore_spec_reads_file(tmp_path):
    ignore_file = tmp_path / ".batchignore"
    ignore_file.write_text("# drafts\ndrafts/\n*.tmp\n", encoding="utf-8")
    spec = load_ignore_spec(ignore_file)

    assert spec.match_file("drafts/a.jpg")
    assert spec.match_file("x/y.tmp")
    assert not spec.match_file("final/a.jpg")


# --- Renaming ---

def test_rename_updates_tree_and_descriptors(wedding_project):
    report = scan_tree(wedding_project, ALL, rename=True)

    assert rel_paths(report) == {
        "wedding/wedding_photos-regular/wedding_photos-regular_img1.jpg",
        "wedding/wedding_notes.txt",
        "top.jpg",
    }
    for f in report.files:
        # Paths were patched after the ancestor directories were renamed
        assert f.absolute_path.exists()
        assert f.display_name == f.absolute_path.name
    assert not (wedding_project / "Wedding").exists()
    assert (wedding_project / "wedding" / "wedding_photos-regular").is_dir()
    # Ignored entries are never renamed
    assert (wedding_project / "Thumbs.db").exists()


def test_second_rename_scan_is_a_no_op(wedding_project):
    first = scan_tree(wedding_project, ALL, rename=True)
    second = scan_tree(wedding_project, ALL, rename=True)

    assert second.renamed == 0
    assert rel_paths(second) == rel_paths(first)


def test_rename_collision_excludes_file(tmp_path):
    root = tmp_path / "input"
    (root / "pics").mkdir(parents=True)
    (root / "pics" / "IMG1 a.jpg").write_bytes(b"a")
    (root / "pics" / "IMG1 b.jpg").write_bytes(b"b")

    report = scan_tree(root, ALL, rename=True)

    assert rel_paths(report) == {"pics/pics_img1.jpg"}
    assert len(report.errors) == 1
    failure = report.errors[0]
    assert failure.operation == "rename file"
    assert failure.path.name == "IMG1 b.jpg"
    assert str(failure.path) in str(failure)
    # Failed entry keeps its original name on disk
    assert (root / "pics" / "IMG1 b.jpg").exists()


# --- Failures ---

def test_unreadable_directory_is_treated_as_empty(wedding_project, monkeypatch):
    real_scandir = os.scandir

    def fake_scandir(path):
        if Path(path).name == "Photos - Regular":
            raise PermissionError(13, "Permission denied", str(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", fake_scandir)
    report = scan_tree(wedding_project, ALL)

    assert rel_paths(report) == {"Wedding/Notes.txt", "top.jpg"}
    assert len(report.errors) == 1
    assert report.errors[0].operation == "read directory"
    assert "Permission denied" in str(report.errors[0])


def test_scan_can_be_cancelled(wedding_project):
    scanner = TreeScanner(wedding_project, ALL, should_cancel=lambda: True)
    with pytest.raises(RunCancelled):
        scanner.scan()
