"""Parse webnote files into Documents.

A file is a sequence of sections. A section starts with a header line,
``# note://<name>`` or ``# http(s)://<url>``, followed by ``name: value``
field lines, a blank line, and a free-text body that runs until the next
section header or the end of the file.
"""

from enum import Enum
from pathlib import Path
from typing import Optional, Union

from .exceptions import ParseError
from .models import SINGLETON_FIELD_NAMES, TAGS, Document, Section
from .utils import normalize_note_string

NOTE_PREFIX = "# note://"
URL_PREFIXES = ("# http://", "# https://")
FIELD_SEPARATOR = ": "


class ParseState(Enum):
    FILE_START = "file_start"
    IN_HEADER = "in_header"
    IN_BODY = "in_body"


def _start_section(line: str, line_number: int, path: Optional[str]) -> Optional[Section]:
    """Return a new section if line is a section header line."""
    if line.startswith(NOTE_PREFIX):
        note = normalize_note_string(line[len(NOTE_PREFIX):])
        if not note:
            raise ParseError("Empty note string", line_number, path)
        return Section(note=note)
    if line.startswith(URL_PREFIXES):
        return Section(url=line[len("# "):])
    return None


def _trim_trailing_blank(section: Optional[Section]) -> None:
    """Drop the single blank line written between a body and the next header."""
    if section is not None and section.body and section.body[-1] == "":
        section.body.pop()


def _parse_field_line(line: str, line_number: int, path: Optional[str]) -> tuple[str, list[str]]:
    name, sep, rest = line.partition(FIELD_SEPARATOR)
    if not sep:
        raise ParseError("Invalid header line", line_number, path)
    if name in SINGLETON_FIELD_NAMES:
        values = [rest]
    else:
        values = rest.split(",")
    if name == TAGS:
        values = sorted(set(values))
    if not values:
        raise ParseError("Invalid header line", line_number, path)
    return name, values


def parse_text(text: str, path: str = "") -> Document:
    """Parse the text of a webnote file.

    Args:
        text: Full file content.
        path: Path recorded on the returned Document and used in errors.

    Returns:
        The parsed Document.

    Raises:
        ParseError: if the text does not follow the webnote grammar.
    """
    document = Document(path)
    state = ParseState.FILE_START
    section: Optional[Section] = None

    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()

    for line_number, raw in enumerate(lines, start=1):
        line = raw.rstrip()

        new_section = _start_section(line, line_number, path or None)
        if new_section is not None:
            _trim_trailing_blank(section)
            section = new_section
            document.add(section)
            state = ParseState.IN_HEADER
        elif state is ParseState.IN_HEADER:
            if line == "":
                state = ParseState.IN_BODY
            else:
                name, values = _parse_field_line(line, line_number, path or None)
                section.add_field(name, values)
        elif state is ParseState.IN_BODY:
            section.append_body(line)
        else:
            raise ParseError("Unexpected start to web note file", line_number, path or None)

    _trim_trailing_blank(section)
    return document


def load_document(path: Union[str, Path]) -> Document:
    """Load and parse a webnote file from disk."""
    text = Path(path).read_text(encoding="utf-8")
    return parse_text(text, str(path))
