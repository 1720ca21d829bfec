"""Section selection.

A SectionMatcher is a conjunction of criteria. Each criterion looks at one
dimension of a section: its kind (note or bookmark), its note string, URL,
URL host, body, a scalar header field, or its tags. A section matches when
every criterion holds; a matcher without criteria matches everything.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Mapping, Optional, Sequence

from .exceptions import MatcherError
from .models import TAGS, Document, Section
from .utils import get_tags


class Dimension(Enum):
    """The part of a section a criterion looks at."""

    KIND = "kind"
    NOTE = "note"
    URL = "url"
    HOST = "host"
    BODY = "body"
    FIELD = "field"
    TAGS = "tags"


class Kind(Enum):
    NOTE = "note"
    BOOKMARK = "bookmark"


# Names accepted by equality (--e<name>) and pattern (--m<name>) selection.
MATCHABLE_NAMES: tuple[str, ...] = (
    "author", "body", "date", "description", "error", "host",
    "note", "status", "tags", "title", "url",
)

_SPECIAL_DIMENSIONS = {
    "note": Dimension.NOTE,
    "url": Dimension.URL,
    "host": Dimension.HOST,
    "body": Dimension.BODY,
    TAGS: Dimension.TAGS,
}


def dimension_for(name: str) -> Dimension:
    """Map a selection name to the dimension it looks at."""
    if name not in MATCHABLE_NAMES:
        raise MatcherError(f"Unknown selector: {name}")
    return _SPECIAL_DIMENSIONS.get(name, Dimension.FIELD)


def _host_candidates(section: Section) -> list[str]:
    if not section.url:
        return []
    try:
        return [section.host()]
    except ValueError:
        return []


def _field_candidates(section: Section, name: str) -> list[str]:
    value = section.field_value(name)
    return [value] if value is not None else []


# Strings a pattern is searched in, per dimension. The pattern matches if it
# is found in at least one of them.
_SEARCH_CANDIDATES: dict[Dimension, Callable[[Section, str], list[str]]] = {
    Dimension.NOTE: lambda s, name: [s.note],
    Dimension.URL: lambda s, name: [s.url],
    Dimension.HOST: lambda s, name: _host_candidates(s),
    Dimension.BODY: lambda s, name: s.body,
    Dimension.FIELD: _field_candidates,
}

_EQUALS: dict[Dimension, Callable[[Section, str, str], bool]] = {
    Dimension.NOTE: lambda s, name, value: s.note == value,
    Dimension.URL: lambda s, name, value: s.url == value,
    Dimension.HOST: lambda s, name, value: s.equals_host(value),
    Dimension.BODY: lambda s, name, value: len(s.body) == 1 and s.body[0] == value,
    Dimension.FIELD: lambda s, name, value: s.field_equals_value(name, value),
}


class Criterion(ABC):
    """A single test applied to a section."""

    dimension: Dimension

    @abstractmethod
    def matches(self, section: Section) -> bool:
        """Return True if section satisfies this criterion."""


@dataclass(frozen=True)
class KindIs(Criterion):
    kind: Kind
    dimension: Dimension = Dimension.KIND

    def matches(self, section: Section) -> bool:
        if self.kind is Kind.NOTE:
            return section.is_note
        return section.is_bookmark


@dataclass(frozen=True)
class Equals(Criterion):
    name: str
    value: str
    dimension: Dimension = Dimension.FIELD

    def matches(self, section: Section) -> bool:
        return _EQUALS[self.dimension](section, self.name, self.value)


@dataclass(frozen=True)
class Search(Criterion):
    name: str
    pattern: re.Pattern
    dimension: Dimension = Dimension.FIELD

    def matches(self, section: Section) -> bool:
        candidates = _SEARCH_CANDIDATES[self.dimension](section, self.name)
        return any(self.pattern.search(c) for c in candidates)


@dataclass(frozen=True)
class HasAllTags(Criterion):
    tags: tuple[str, ...]
    dimension: Dimension = Dimension.TAGS

    def matches(self, section: Section) -> bool:
        return section.field_has_all(TAGS, list(self.tags))


@dataclass(frozen=True)
class HasAnyTag(Criterion):
    tags: tuple[str, ...]
    dimension: Dimension = Dimension.TAGS

    def matches(self, section: Section) -> bool:
        return section.field_has_any(TAGS, list(self.tags))


def equals(name: str, value: str) -> Criterion:
    """Build an equality criterion; for tags, every listed tag must be present."""
    dimension = dimension_for(name)
    if dimension is Dimension.TAGS:
        return HasAllTags(tuple(get_tags(value)))
    return Equals(name, value, dimension)


def search(name: str, pattern: str) -> Criterion:
    """Build a pattern criterion; for tags, at least one listed tag must be present."""
    dimension = dimension_for(name)
    if dimension is Dimension.TAGS:
        return HasAnyTag(tuple(get_tags(pattern)))
    try:
        compiled = re.compile(pattern)
    except re.error as e:
        raise MatcherError(f"Invalid pattern for {name}: {e}") from e
    return Search(name, compiled, dimension)


class SectionMatcher:
    """Selects sections that satisfy every one of its criteria."""

    def __init__(self, criteria: Iterable[Criterion] = ()):
        self.criteria: list[Criterion] = list(criteria)

    @classmethod
    def from_options(
        cls,
        note: bool = False,
        url: bool = False,
        equal_values: Optional[Mapping[str, str]] = None,
        patterns: Optional[Mapping[str, str]] = None,
    ) -> "SectionMatcher":
        """Build a matcher from command line style selection options.

        Args:
            note: Only match notes.
            url: Only match bookmarks.
            equal_values: Selector name to exact value. Empty values are ignored.
            patterns: Selector name to regular expression. Empty values are ignored.

        Raises:
            MatcherError: if both note and url are set, a name is given both an
                exact value and a pattern, or a pattern does not compile.
        """
        if note and url:
            raise MatcherError("Only one of --note and --url can be specified")
        equal_values = {k: v for k, v in (equal_values or {}).items() if v}
        patterns = {k: v for k, v in (patterns or {}).items() if v}
        conflicts = sorted(set(equal_values) & set(patterns))
        if conflicts:
            name = conflicts[0]
            raise MatcherError(f"Only one of --e{name} and --m{name} can be specified")

        criteria: list[Criterion] = []
        if note:
            criteria.append(KindIs(Kind.NOTE))
        if url:
            criteria.append(KindIs(Kind.BOOKMARK))
        criteria.extend(equals(name, value) for name, value in equal_values.items())
        criteria.extend(search(name, pattern) for name, pattern in patterns.items())
        return cls(criteria)

    def matches(self, section: Section) -> bool:
        return all(c.matches(section) for c in self.criteria)

    __call__ = matches

    def select(self, sections: Sequence[Section]) -> list[Section]:
        return [s for s in sections if self.matches(s)]

    def matching_sections(self, document: Document) -> list[Section]:
        return self.select(document.sections)
