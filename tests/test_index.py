"""Tests for the index builder."""

from pathlib import Path

import pytest

from webnotes.exceptions import IndexBuildError
from webnotes.index import (
    IndexBuilder,
    IndexEntry,
    build_index,
    load_index_file,
    name_from_index,
)
from webnotes.parser import load_document
from webnotes.utils import content_hash


def _snapshot(index_root: Path) -> dict[str, str]:
    return {
        p.relative_to(index_root).as_posix(): p.read_text(encoding="utf-8")
        for p in sorted(index_root.rglob("*"))
        if p.is_file()
    }


def test_layout(notes_root: Path):
    build_index(notes_root)
    index_root = notes_root / "wn_index"
    for category in ("authors", "hosts", "notes", "tags"):
        assert (index_root / category / "index").is_file()


def test_listings_are_sorted_by_name(notes_root: Path):
    build_index(notes_root)
    entries = load_index_file(notes_root / "wn_index" / "hosts" / "index")
    assert [e.name for e in entries] == ["blog.example.org", "docs.python.org", "example.com"]
    assert entries[0] == IndexEntry("blog.example.org", content_hash("blog.example.org"))

    tags = (notes_root / "wn_index" / "tags" / "index").read_text(encoding="utf-8")
    assert tags == "".join(
        f"{content_hash(t)}: {t}\n" for t in ("python", "reading", "web")
    )


def test_group_documents(notes_root: Path):
    build_index(notes_root)
    key = content_hash("example.com")
    doc = load_document(notes_root / "wn_index" / "hosts" / f"{key}.wn")
    assert [s.url for s in doc.sections] == [
        "https://example.com/article",
        "https://example.com/other",
    ]

    author = load_document(notes_root / "wn_index" / "authors" / f"{content_hash('Ann Author')}.wn")
    assert len(author.sections) == 2

    web = load_document(notes_root / "wn_index" / "tags" / f"{content_hash('web')}.wn")
    assert [s.url for s in web.sections] == [
        "https://example.com/article",
        "http://blog.example.org/post",
    ]


def test_notes_listing(notes_root: Path):
    build_index(notes_root)
    text = (notes_root / "wn_index" / "notes" / "index").read_text(encoding="utf-8")
    assert text == "reading.wn#reading_list\n"


def test_rebuild_is_deterministic(notes_root: Path):
    build_index(notes_root)
    first = _snapshot(notes_root / "wn_index")
    build_index(notes_root)
    assert _snapshot(notes_root / "wn_index") == first


def test_rebuild_replaces_stale_output(notes_root: Path):
    stale = notes_root / "wn_index" / "tags" / "stale.wn"
    stale.parent.mkdir(parents=True)
    stale.write_text("# note://stale\n", encoding="utf-8")
    build_index(notes_root)
    assert not stale.exists()
    entries = load_index_file(notes_root / "wn_index" / "tags" / "index")
    assert "stale" not in [e.name for e in entries]


def test_index_path_must_be_a_directory(notes_root: Path):
    (notes_root / "wn_index").write_text("oops", encoding="utf-8")
    with pytest.raises(IndexBuildError, match="not a directory"):
        build_index(notes_root)


def test_duplicate_note_in_one_file(notes_root: Path):
    (notes_root / "dup.wn").write_text("# note://same\n\n# note://same\n", encoding="utf-8")
    with pytest.raises(IndexBuildError, match="duplicate note section: dup.wn#same"):
        build_index(notes_root)


def test_same_note_in_two_files_is_allowed(notes_root: Path):
    (notes_root / "a.wn").write_text("# note://same\n", encoding="utf-8")
    (notes_root / "b.wn").write_text("# note://same\n", encoding="utf-8")
    build_index(notes_root)
    text = (notes_root / "wn_index" / "notes" / "index").read_text(encoding="utf-8")
    assert "a.wn#same\n" in text and "b.wn#same\n" in text


def test_result_counts(notes_root: Path):
    result = IndexBuilder(notes_root).build()
    assert result.files == 2
    assert result.sections == 5
    assert result.groups == {"authors": 1, "hosts": 3, "tags": 3, "notes": 1}


def test_custom_index_path(notes_root: Path):
    IndexBuilder(notes_root, index_path="idx").build()
    assert (notes_root / "idx" / "hosts" / "index").is_file()
    assert not (notes_root / "wn_index").exists()


def test_index_files_are_not_scanned(notes_root: Path):
    build_index(notes_root)
    result = build_index(notes_root)
    assert result.files == 2


def test_name_from_index():
    entries = [IndexEntry("python", "abc"), IndexEntry("web", "def")]
    assert name_from_index(entries, "def") == "web"
    with pytest.raises(IndexBuildError):
        name_from_index(entries, "zzz")


def test_load_index_file_rejects_bad_lines(tmp_path: Path):
    path = tmp_path / "index"
    path.write_text("abc: ok\nbroken\n", encoding="utf-8")
    with pytest.raises(IndexBuildError, match="Invalid index line"):
        load_index_file(path)
