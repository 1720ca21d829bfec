"""Tests for Field, Section and Document."""

from datetime import date

import pytest

from webnotes.exceptions import SectionError
from webnotes.models import SINGLETON_FIELD_NAMES, Document, Field, Section


class TestField:
    def test_add_merges_new_values_only(self):
        f = Field("keywords", ["a", "b"])
        f.add(Field("keywords", ["b", "c"]))
        assert f.values == ["a", "b", "c"]

    @pytest.mark.parametrize("name", sorted(SINGLETON_FIELD_NAMES))
    def test_add_never_changes_singletons(self, name):
        f = Field(name, ["first"])
        f.add(Field(name, ["second"]))
        f.add(Field(name, ["third", "fourth"]))
        assert f.values == ["first"]


class TestSectionConstruction:
    def test_note(self):
        s = Section(note="a_note")
        assert s.is_note and not s.is_bookmark
        assert s.id() == "a_note"

    def test_bookmark(self):
        s = Section(url="https://example.com")
        assert s.is_bookmark and not s.is_note
        assert s.id() == "https://example.com"

    def test_neither_fails(self):
        with pytest.raises(SectionError, match="note or url must be given"):
            Section()

    def test_both_fails(self):
        with pytest.raises(SectionError, match="only a note or a url"):
            Section(note="n", url="https://example.com")

    @pytest.mark.parametrize("note", [" ", "\t\n"])
    def test_blank_note_fails(self, note):
        with pytest.raises(SectionError, match="note cannot be blank"):
            Section(note=note)

    @pytest.mark.parametrize("url", ["example.com/page", "ftp://example.com", "note://x"])
    def test_url_needs_http_scheme(self, url):
        with pytest.raises(SectionError, match="url must start with"):
            Section(url=url)

    def test_id_detects_inconsistent_section(self):
        s = Section(note="n")
        s.url = "https://example.com"
        with pytest.raises(SectionError):
            s.id()


class TestSectionFields:
    def test_field_lookup(self):
        s = Section(note="n")
        assert s.field("title") is None
        s.set_field_value("title", "T")
        assert s.field("title") == Field("title", ["T"])
        assert s.has_field("title")

    def test_field_value_requires_exactly_one_value(self):
        s = Section(note="n")
        s.set_field("keywords", ["a", "b"])
        assert s.field_value("keywords") is None
        assert s.field_values("keywords") == ["a", "b"]
        s.set_field("keywords", ["a"])
        assert s.field_value("keywords") == "a"

    def test_set_field_replaces(self):
        s = Section(note="n")
        s.set_field("keywords", ["a"])
        s.set_field("keywords", ["b", "c"])
        assert s.field_values("keywords") == ["b", "c"]
        assert len(s.fields) == 1

    def test_fill_field_value_does_not_clobber(self):
        s = Section(note="n")
        s.fill_field_value("title", "first")
        s.fill_field_value("title", "second")
        assert s.field_value("title") == "first"

    def test_add_field_keeps_names_unique(self):
        s = Section(note="n")
        s.add_field("keywords", ["a"])
        s.add_field("keywords", ["a", "b"])
        assert [f.name for f in s.fields] == ["keywords"]
        assert s.field_values("keywords") == ["a", "b"]

    def test_field_has_any_and_all_use_the_named_field(self):
        s = Section(note="n")
        s.set_field("keywords", ["x", "y"])
        s.set_tags(["t"])
        assert s.field_has_any("keywords", ["x", "z"])
        assert not s.field_has_any("keywords", ["t"])
        assert s.field_has_all("keywords", ["x", "y"])
        assert not s.field_has_all("keywords", ["x", "t"])
        assert s.field_has_all("missing", [])
        assert not s.field_has_any("missing", ["x"])

    def test_delete_fields(self):
        s = Section(note="n")
        s.set_field_value("title", "T")
        s.set_field_value("author", "A")
        s.set_field_value("date", "2024-01-01")
        s.delete_fields("title", "author")
        assert [f.name for f in s.fields] == ["date"]


class TestTags:
    def test_add_tag_is_idempotent(self):
        once = Section(note="n")
        once.add_tag("x")
        twice = Section(note="n")
        twice.add_tag("x")
        twice.add_tag("x")
        assert once.field_values("tags") == twice.field_values("tags") == ["x"]

    def test_add_tags_sorted_and_deduplicated(self):
        s = Section(note="n")
        s.add_tags(["c", "a", "b", "a"])
        assert s.field_values("tags") == ["a", "b", "c"]

    def test_delete_last_tag_removes_field(self):
        s = Section(note="n")
        s.add_tags(["a", "b"])
        s.delete_tag("a")
        assert s.field_values("tags") == ["b"]
        s.delete_tag("b")
        assert not s.has_field("tags")

    def test_delete_tag_without_tags(self):
        s = Section(note="n")
        s.delete_tag("a")
        assert s.fields == []

    def test_set_tags_empty_deletes(self):
        s = Section(note="n")
        s.set_tags(["b", "a", "b"])
        assert s.field_values("tags") == ["a", "b"]
        s.set_tags([])
        assert not s.has_field("tags")


class TestStatusAndError:
    def test_set_status_removes_error(self):
        s = Section(url="https://example.com")
        s.set_error("connection refused")
        s.set_status("404 Not Found")
        assert s.field_value("status") == "404 Not Found"
        assert not s.has_field("error")

    def test_set_error_removes_status(self):
        s = Section(url="https://example.com")
        s.set_status("500 Internal Server Error")
        s.set_error(ValueError("boom"))
        assert s.field_value("error") == "boom"
        assert not s.has_field("status")


class TestDates:
    def test_set_date(self):
        s = Section(note="n")
        s.set_date(date(2024, 1, 2))
        assert s.field_value("date") == "2024-01-02"

    def test_fill_date_keeps_existing(self):
        s = Section(note="n")
        s.set_field_value("date", "2020-05-05")
        s.fill_date(date(2024, 1, 2))
        assert s.field_value("date") == "2020-05-05"


class TestIdentityAndHost:
    def test_matches_identity(self):
        assert Section(note="a").matches_identity(Section(note="a"))
        assert not Section(note="a").matches_identity(Section(note="b"))
        assert Section(url="https://x.org").matches_identity(Section(url="https://x.org"))
        assert not Section(url="https://x.org").matches_identity(Section(note="https://x.org"))

    def test_host(self):
        assert Section(url="https://user@example.com:8080/path").host() == "example.com:8080"
        with pytest.raises(SectionError):
            Section(note="n").host()

    def test_equals_host(self):
        s = Section(url="https://example.com/a")
        assert s.equals_host("")
        assert s.equals_host("example.com")
        assert not s.equals_host("www.example.com")

    def test_equals_host_on_note_is_false(self):
        s = Section(note="n")
        assert not s.equals_host("")
        assert not s.equals_host("example.com")

    def test_sort_key_puts_notes_first(self):
        sections = [Section(url="https://a.org"), Section(note="z"), Section(note="b")]
        assert [s.id() for s in sorted(sections, key=Section.sort_key)] == [
            "b", "z", "https://a.org",
        ]


class TestSectionBody:
    def test_fill_body_only_when_empty(self):
        s = Section(note="n")
        s.fill_body(["one"])
        s.fill_body(["two"])
        assert s.body == ["one"]

    def test_delete_all(self):
        s = Section(note="n", body=["text"])
        s.set_field_value("title", "T")
        s.delete_all()
        assert s.fields == [] and s.body == []


class TestSectionAdd:
    def test_merges_fields_without_overwriting(self):
        a = Section(note="n", body=["first"])
        a.set_field_value("title", "A title")
        a.set_tags(["x"])
        b = Section(note="n", body=["second"])
        b.set_field_value("title", "B title")
        b.set_field_value("author", "B author")
        b.set_tags(["y"])

        a.add(b)

        assert a.field_value("title") == "A title"
        assert a.field_value("author") == "B author"
        assert a.field_values("tags") == ["x", "y"]
        assert a.body == ["first", "", "second"]

    def test_empty_bodies_get_no_separator(self):
        a = Section(note="n")
        a.add(Section(note="n", body=["text"]))
        assert a.body == ["text"]
        a.add(Section(note="n"))
        assert a.body == ["text"]

    def test_copies_field_values(self):
        a = Section(note="n")
        b = Section(note="n")
        b.set_field("keywords", ["k"])
        a.add(b)
        a.field("keywords").values.append("extra")
        assert b.field_values("keywords") == ["k"]


class TestDocument:
    def test_add_delete_find(self):
        doc = Document("x.wn")
        first = Section(note="a")
        second = Section(url="https://example.com")
        doc.add(first)
        doc.add(second)
        assert doc.find(Section(url="https://example.com")) is second
        doc.delete(first)
        assert doc.sections == [second]
        assert doc.find(Section(note="a")) is None

    def test_delete_uses_identity_not_equality(self):
        doc = Document("x.wn")
        first = Section(note="a")
        twin = Section(note="a")
        doc.add(first)
        doc.add(twin)
        doc.delete(twin)
        assert len(doc) == 1
        assert doc.sections[0] is first
