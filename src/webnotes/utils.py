"""Utility functions for webnotes."""

import hashlib
import re


def remove_extra_whitespace(text: str) -> str:
    """Collapse runs of whitespace to a single space and trim the ends."""
    return re.sub(r"\s+", " ", text).strip()


def normalize_note_string(text: str) -> str:
    """Turn free text into a note string: trimmed, whitespace runs become underscores."""
    return "_".join(text.split())


def content_hash(name: str) -> str:
    """Hex MD5 digest of a display name, used as a filesystem-safe key."""
    return hashlib.md5(name.encode("utf-8")).hexdigest()


def get_tags(tags_string: str) -> list[str]:
    """Split a comma separated tag string into tags."""
    if not tags_string:
        return []
    return tags_string.split(",")
