"""Index builder.

The index groups sections from every webnote file by author, URL host and
tag. Each group is written as a synthetic webnote file named by the MD5 of
the group's name, and each category gets an ``index`` listing that maps
hashes back to names::

    wn_index/
        authors/<md5>.wn   authors/index
        hosts/<md5>.wn     hosts/index
        tags/<md5>.wn      tags/index
        notes/index

The index is always rebuilt from scratch. Listings are sorted by name, and
sections inside a synthetic file follow the order the source files are
scanned in.
"""

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import click

from .config import DEFAULT_INDEX_PATH
from .exceptions import IndexBuildError
from .files import WEBNOTE_SUFFIX, find_webnote_files
from .models import TAGS, Document, Section
from .parser import load_document
from .serializer import DEFAULT_SERIALIZER, Serializer
from .utils import content_hash

AUTHORS = "authors"
HOSTS = "hosts"
NOTES = "notes"
TAG_INDEX = "tags"
INDEX_CATEGORIES: tuple[str, ...] = (AUTHORS, HOSTS, NOTES, TAG_INDEX)
GROUPED_CATEGORIES: tuple[str, ...] = (AUTHORS, HOSTS, TAG_INDEX)
LISTING_NAME = "index"


@dataclass(frozen=True)
class IndexEntry:
    """A display name and the hash its synthetic file is named by."""

    name: str
    content_hash: str


@dataclass
class IndexGroup:
    """Sections sharing one author, host or tag."""

    name: str
    document: Document


@dataclass
class IndexResult:
    files: int = 0
    sections: int = 0
    groups: dict[str, int] = field(default_factory=dict)


class IndexBuilder:
    """Rebuilds the index directory from the webnote files under root."""

    def __init__(
        self,
        root: Union[str, Path],
        index_path: str = DEFAULT_INDEX_PATH,
        serializer: Optional[Serializer] = None,
        verbose: bool = False,
    ):
        self.root = Path(root)
        self.index_path = index_path
        self.index_root = self.root / index_path
        self.serializer = serializer or DEFAULT_SERIALIZER
        self.verbose = verbose
        self._groups: dict[str, dict[str, IndexGroup]] = {}
        self._notes: dict[tuple[str, str], str] = {}

    def build(self) -> IndexResult:
        """Delete and rebuild the index.

        Raises:
            IndexBuildError: if the index path exists and is not a directory,
                or a file has two note sections with the same note string.
        """
        self._prepare_directories()
        self._groups = {category: {} for category in GROUPED_CATEGORIES}
        self._notes = {}

        result = IndexResult()
        for relative in find_webnote_files(self.root, self.index_path):
            document = load_document(self.root / relative)
            result.files += 1
            for section in document.sections:
                self._add_section(relative.as_posix(), section)
                result.sections += 1
            if self.verbose:
                click.echo(f"  Indexed {relative} ({len(document)} sections)")

        for category in GROUPED_CATEGORIES:
            self._write_category(category)
            result.groups[category] = len(self._groups[category])
        self._write_notes_listing()
        result.groups[NOTES] = len(self._notes)
        return result

    def _prepare_directories(self) -> None:
        if self.index_root.exists():
            if not self.index_root.is_dir():
                raise IndexBuildError(f"{self.index_root} exists and is not a directory")
            shutil.rmtree(self.index_root)
        for category in INDEX_CATEGORIES:
            (self.index_root / category).mkdir(parents=True, exist_ok=True)

    def _add_section(self, relative: str, section: Section) -> None:
        if section.note:
            key = (relative, section.note)
            if key in self._notes:
                raise IndexBuildError(f"Found duplicate note section: {relative}#{section.note}")
            self._notes[key] = section.note
        elif section.url:
            try:
                host = section.host()
            except ValueError:
                host = None
            if host is not None:
                self._group(HOSTS, host).document.add(section)
        else:
            raise IndexBuildError(f"Found section with neither note or url: {relative}")

        author = section.field_value("author")
        if author is not None:
            self._group(AUTHORS, author).document.add(section)

        for tag in section.field_values(TAGS) or []:
            self._group(TAG_INDEX, tag).document.add(section)

    def _group(self, category: str, name: str) -> IndexGroup:
        key = content_hash(name)
        groups = self._groups[category]
        if key not in groups:
            path = self.index_root / category / f"{key}{WEBNOTE_SUFFIX}"
            groups[key] = IndexGroup(name, Document(str(path)))
        return groups[key]

    def _write_category(self, category: str) -> None:
        groups = self._groups[category]
        for group in groups.values():
            self.serializer.save(group.document)
        entries = sorted(
            (IndexEntry(group.name, key) for key, group in groups.items()),
            key=lambda e: (e.name, e.content_hash),
        )
        lines = [f"{e.content_hash}: {e.name}\n" for e in entries]
        (self.index_root / category / LISTING_NAME).write_text("".join(lines), encoding="utf-8")

    def _write_notes_listing(self) -> None:
        lines = [f"{path}#{note}\n" for path, note in sorted(self._notes)]
        (self.index_root / NOTES / LISTING_NAME).write_text("".join(lines), encoding="utf-8")


def build_index(
    root: Union[str, Path],
    index_path: str = DEFAULT_INDEX_PATH,
    verbose: bool = False,
) -> IndexResult:
    return IndexBuilder(root, index_path, verbose=verbose).build()


def load_index_file(path: Union[str, Path]) -> list[IndexEntry]:
    """Read a category listing of ``<hash>: <name>`` lines."""
    entries = []
    for line in Path(path).read_text(encoding="utf-8").splitlines():
        key, sep, name = line.partition(": ")
        if not sep:
            raise IndexBuildError(f"Invalid index line: {line!r}")
        entries.append(IndexEntry(name, key))
    return entries


def name_from_index(entries: list[IndexEntry], key: str) -> str:
    for entry in entries:
        if entry.content_hash == key:
            return entry.name
    raise IndexBuildError(f"Unable to find index name for {key}")
