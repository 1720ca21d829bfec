"""Finding and selecting webnote files."""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Union

from .config import DEFAULT_INDEX_PATH
from .exceptions import ConfigError
from .models import Document
from .parser import load_document

WEBNOTE_SUFFIX = ".wn"


def find_webnote_files(root: Path, index_path: str = DEFAULT_INDEX_PATH) -> list[Path]:
    """Find all webnote files below root, skipping the index tree.

    Args:
        root: Directory to scan.
        index_path: Index directory, relative to root; files inside it are skipped.

    Returns:
        Paths relative to root, sorted so that scans are repeatable.
    """
    root = Path(root)
    index_root = root / index_path
    files = []
    for path in root.rglob(f"*{WEBNOTE_SUFFIX}"):
        if not path.is_file() or path.is_relative_to(index_root):
            continue
        files.append(path.relative_to(root))
    return sorted(files)


@dataclass
class FileSelector:
    """Restricts an operation to the files in one directory or to one file."""

    directory: Optional[str] = None
    file: Optional[str] = None

    def __post_init__(self):
        if self.directory and self.file:
            raise ConfigError("Only one file matcher option can be specified")

    def matches(self, relative: Path) -> bool:
        if self.directory:
            return relative.parent == Path(self.directory)
        if self.file:
            return relative == Path(self.file)
        return True

    def select(self, paths: Iterable[Path]) -> list[Path]:
        return [p for p in paths if self.matches(p)]


def open_out_document(path: Union[str, Path]) -> Document:
    """Load the output file of copy/move/add, or start an empty one."""
    path = Path(path)
    if path.suffix != WEBNOTE_SUFFIX:
        raise ConfigError(f"Out file must end with {WEBNOTE_SUFFIX}")
    if path.is_dir():
        raise ConfigError(f"Out file is a directory: {path}")
    if path.exists():
        return load_document(path)
    return Document(str(path))
