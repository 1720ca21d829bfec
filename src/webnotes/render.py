"""Markdown to HTML for browsing section bodies."""

import html

import marko
from marko.html_renderer import HTMLRenderer

FILE_ROUTE = "/file/"


def is_webnote_link(dest: str) -> bool:
    """True for relative links to a section in another file, e.g. ``reading.wn#Some_note``."""
    if dest.startswith(("http://", "https://")):
        return False
    if dest.endswith(".wn"):
        return False
    return ".wn#" in dest


class WebnoteHTMLRenderer(HTMLRenderer):
    """Opens external links in a new tab and routes webnote links through the app."""

    def render_link(self, element) -> str:
        body = self.render_children(element)
        title = f' title="{html.escape(element.title)}"' if element.title else ""
        if is_webnote_link(element.dest):
            url = self.escape_url(FILE_ROUTE + element.dest.lstrip("/"))
            return f'<a href="{url}"{title}>{body}</a>'
        url = self.escape_url(element.dest)
        target = ' target="_blank"' if "://" in element.dest else ""
        return f'<a href="{url}"{title}{target}>{body}</a>'


_markdown = marko.Markdown(renderer=WebnoteHTMLRenderer)


def markdown_to_html(text: str) -> str:
    return _markdown.convert(text)


def body_to_html(lines: list[str]) -> str:
    return markdown_to_html("\n".join(lines))
