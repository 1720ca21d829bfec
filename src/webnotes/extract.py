"""Pull titles and body lines out of fetched pages.

Multi-entry results put a blank line between entries so they read as
separate Markdown paragraphs in a section body.
"""

from bs4 import BeautifulSoup

from .utils import remove_extra_whitespace


def _is_absolute(link: str) -> bool:
    return link.startswith(("https://", "http://"))


def _separated(entries: list[str]) -> list[str]:
    lines: list[str] = []
    for entry in entries:
        if lines:
            lines.append("")
        lines.append(entry)
    return lines


def content_title(page: BeautifulSoup) -> str:
    title = page.find("title")
    return remove_extra_whitespace(title.get_text()) if title else ""


def content_images(page: BeautifulSoup) -> list[str]:
    """Absolute image sources in the page body, as Markdown images."""
    sources = [img.get("src", "") for img in page.select("body img")]
    return _separated([f'![alt text]({src} "title")' for src in sources if _is_absolute(src)])


def content_links(page: BeautifulSoup) -> list[str]:
    """Absolute links in the page body, as Markdown links."""
    links = [
        f"[{remove_extra_whitespace(a.get_text())}]({a.get('href', '')})"
        for a in page.select("body a")
        if _is_absolute(a.get("href", ""))
    ]
    return _separated(links)


def content_p(page: BeautifulSoup) -> list[str]:
    """Text of each non-empty <p>, whitespace collapsed."""
    texts = (remove_extra_whitespace(p.get_text()) for p in page.find_all("p"))
    return _separated([t for t in texts if t])


def content_text(page: BeautifulSoup) -> list[str]:
    """All text in the page body, line by line."""
    body = page.find("body")
    if body is None:
        return []
    return _separated(body.get_text().splitlines())
