"""Plain-text notes and annotated bookmarks."""

__version__ = "0.1.0"
