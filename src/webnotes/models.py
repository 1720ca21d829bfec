"""Data models for webnotes.

A webnote file holds an ordered list of sections. Each section is either a
note (identified by a note string) or a bookmark (identified by a URL), and
carries named header fields plus a free-text body.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Union
from urllib.parse import urlsplit

from .exceptions import SectionError

# Rendering order for known fields in a webnote file.
ORDERED_FIELD_NAMES: tuple[str, ...] = (
    "title", "description", "author", "date", "tags", "status", "error",
)

# Fields that hold a single value rather than a list.
SINGLETON_FIELD_NAMES: frozenset[str] = frozenset(
    {"author", "date", "description", "error", "status", "title"}
)

TAGS = "tags"

URL_SCHEMES = ("http://", "https://")


@dataclass
class Field:
    """A named list of values in a section header."""

    name: str
    values: list[str] = field(default_factory=list)

    @property
    def is_singleton(self) -> bool:
        return self.name in SINGLETON_FIELD_NAMES

    def add(self, other: "Field") -> None:
        """Add the values of other that are not already present.

        Singleton fields are never changed by a merge.
        """
        if self.is_singleton:
            return
        for value in other.values:
            if value not in self.values:
                self.values.append(value)


@dataclass
class Section:
    """One note or bookmark in a webnote file.

    Exactly one of note and url must be set.
    """

    note: str = ""
    url: str = ""
    fields: list[Field] = field(default_factory=list)
    body: list[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.note and not self.url:
            raise SectionError("note or url must be given")
        if self.note and self.url:
            raise SectionError("only a note or a url can be given")
        if self.note and not self.note.strip():
            raise SectionError("note cannot be blank")
        if self.url and not self.url.startswith(URL_SCHEMES):
            raise SectionError(f"url must start with http:// or https://: {self.url}")

    @property
    def is_note(self) -> bool:
        return bool(self.note)

    @property
    def is_bookmark(self) -> bool:
        return bool(self.url)

    def id(self) -> str:
        """Return the note string or the URL (scheme included)."""
        if not self.note and not self.url:
            raise SectionError("Section has no note and url")
        if self.note and self.url:
            raise SectionError("Section has both note and url")
        return self.note or self.url

    def sort_key(self) -> tuple[int, str]:
        """Notes sort before bookmarks, then by identity string."""
        return (0, self.note) if self.note else (1, self.url)

    def matches_identity(self, other: "Section") -> bool:
        """True if both sections have the same note string or the same URL."""
        if self.note:
            return self.note == other.note
        if self.url:
            return self.url == other.url
        return not other.note and not other.url

    # Fields

    def field(self, name: str) -> Optional[Field]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def has_field(self, name: str) -> bool:
        return self.field(name) is not None

    def field_value(self, name: str) -> Optional[str]:
        """Return the field's value if the field has exactly one value."""
        f = self.field(name)
        if f is None or len(f.values) != 1:
            return None
        return f.values[0]

    def field_values(self, name: str) -> Optional[list[str]]:
        f = self.field(name)
        return f.values if f is not None else None

    def field_equals_value(self, name: str, value: str) -> bool:
        return self.field_value(name) == value

    def field_has_any(self, name: str, values: list[str]) -> bool:
        """True if the field holds at least one of values (vacuously true for none)."""
        if not values:
            return True
        present = self.field_values(name)
        if present is None:
            return False
        return any(v in present for v in values)

    def field_has_all(self, name: str, values: list[str]) -> bool:
        """True if the field holds every one of values (vacuously true for none)."""
        if not values:
            return True
        present = self.field_values(name)
        if present is None:
            return False
        return all(v in present for v in values)

    def add_field(self, name: str, values: list[str]) -> None:
        """Add a field, merging into an existing field of the same name."""
        existing = self.field(name)
        if existing is None:
            self.fields.append(Field(name, list(values)))
        else:
            existing.add(Field(name, values))

    def set_field(self, name: str, values: list[str]) -> None:
        """Replace the field's values, creating the field if needed."""
        existing = self.field(name)
        if existing is None:
            self.fields.append(Field(name, list(values)))
        else:
            existing.values = list(values)

    def set_field_value(self, name: str, value: str) -> None:
        self.set_field(name, [value])

    def fill_field_value(self, name: str, value: str) -> None:
        """Set the field only if the section does not have it yet."""
        if not self.has_field(name):
            self.set_field_value(name, value)

    def delete_field(self, name: str) -> None:
        self.fields = [f for f in self.fields if f.name != name]

    def delete_fields(self, *names: str) -> None:
        for name in names:
            self.delete_field(name)

    def delete_all_fields(self) -> None:
        self.fields = []

    # Tags

    def add_tag(self, tag: str) -> None:
        f = self.field(TAGS)
        if f is None:
            self.fields.append(Field(TAGS, [tag]))
            return
        f.values = sorted(set(f.values) | {tag})

    def add_tags(self, tags: list[str]) -> None:
        for tag in tags:
            self.add_tag(tag)

    def delete_tag(self, tag: str) -> None:
        """Remove tag, deleting the tags field when no tags are left."""
        f = self.field(TAGS)
        if f is None:
            return
        values = [v for v in f.values if v != tag]
        if values:
            f.values = values
        else:
            self.delete_field(TAGS)

    def delete_tags(self, tags: list[str]) -> None:
        for tag in tags:
            self.delete_tag(tag)

    def set_tags(self, tags: list[str]) -> None:
        if not tags:
            self.delete_field(TAGS)
        else:
            self.set_field(TAGS, sorted(set(tags)))

    # Date, status and error

    def set_date(self, today: Optional[date] = None) -> None:
        self.set_field_value("date", (today or date.today()).isoformat())

    def fill_date(self, today: Optional[date] = None) -> None:
        if not self.has_field("date"):
            self.set_date(today)

    def set_status(self, status: str) -> None:
        """Record an HTTP status; a section with a status has no error."""
        self.delete_field("error")
        self.set_field_value("status", status)

    def set_error(self, err: Union[str, Exception]) -> None:
        """Record an error; a section with an error has no status."""
        self.set_field_value("error", str(err))
        self.delete_field("status")

    # Body

    def set_body(self, lines: list[str]) -> None:
        self.body = list(lines)

    def fill_body(self, lines: list[str]) -> None:
        if not self.body:
            self.body = list(lines)

    def append_body(self, line: str) -> None:
        self.body.append(line)

    def delete_body(self) -> None:
        self.body = []

    def delete_all(self) -> None:
        self.delete_all_fields()
        self.delete_body()

    # URL

    def host(self) -> str:
        """Return the host (with port, without user info) of the section's URL."""
        if not self.url:
            raise SectionError("Section does not have a url")
        netloc = urlsplit(self.url).netloc
        return netloc.rpartition("@")[2]

    def equals_host(self, host: str) -> bool:
        """True if the URL's host is host; an empty host matches any bookmark."""
        if not self.url:
            return False
        if not host:
            return True
        try:
            return self.host() == host
        except ValueError:
            return False

    def add(self, other: "Section") -> None:
        """Merge other into this section without overwriting existing values."""
        for other_field in other.fields:
            existing = self.field(other_field.name)
            if existing is not None:
                existing.add(other_field)
            else:
                self.fields.append(Field(other_field.name, list(other_field.values)))
        if other.body:
            if self.body:
                self.body.append("")
            self.body.extend(other.body)


@dataclass
class Document:
    """An ordered list of sections backed by one webnote file."""

    path: str
    sections: list[Section] = field(default_factory=list)

    def add(self, section: Section) -> None:
        self.sections.append(section)

    def delete(self, section: Section) -> None:
        """Remove section (by identity, not equality) so it is not written back."""
        self.sections = [s for s in self.sections if s is not section]

    def find(self, section: Section) -> Optional[Section]:
        """Return the first section with the same note string or URL."""
        for s in self.sections:
            if s.matches_identity(section):
                return s
        return None

    def __len__(self) -> int:
        return len(self.sections)
