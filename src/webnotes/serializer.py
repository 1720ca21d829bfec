"""Write Documents back out in canonical webnote form."""

from pathlib import Path
from typing import Iterable, Sequence

from .models import ORDERED_FIELD_NAMES, TAGS, Document, Field, Section


class Serializer:
    """Renders sections and documents as webnote text.

    Args:
        field_order: Field names rendered first, in this order. Other fields
            follow in the order they are stored on the section.
    """

    def __init__(self, field_order: Sequence[str] = ORDERED_FIELD_NAMES):
        self.field_order = tuple(field_order)

    def _ordered_fields(self, section: Section) -> Iterable[Field]:
        for name in self.field_order:
            f = section.field(name)
            if f is not None:
                yield f
        for f in section.fields:
            if f.name not in self.field_order:
                yield f

    def format_section(self, section: Section) -> str:
        """Render one section, ending with a single newline."""
        if section.note:
            lines = [f"# note://{section.note}"]
        else:
            lines = [f"# {section.id()}"]

        for f in self._ordered_fields(section):
            if f.name == TAGS:
                f.values.sort()
            if f.values:
                lines.append(f"{f.name}: {','.join(f.values)}")

        in_body = False
        for line in section.body:
            line = line.rstrip()
            # No blank line before the body text and never two in a row.
            if line == "" and (not in_body or lines[-1] == ""):
                continue
            if not in_body:
                lines.append("")
                in_body = True
            lines.append(line)

        if lines[-1] == "":
            lines.pop()
        return "\n".join(lines) + "\n"

    def format_document(self, document: Document) -> str:
        """Render all sections separated by one blank line."""
        return "\n".join(self.format_section(s) for s in document.sections)

    def save(self, document: Document) -> None:
        """Overwrite the document's file with its canonical text."""
        Path(document.path).write_text(self.format_document(document), encoding="utf-8")


DEFAULT_SERIALIZER = Serializer()


def format_section(section: Section) -> str:
    return DEFAULT_SERIALIZER.format_section(section)


def format_document(document: Document) -> str:
    return DEFAULT_SERIALIZER.format_document(document)


def save_document(document: Document) -> None:
    DEFAULT_SERIALIZER.save(document)
