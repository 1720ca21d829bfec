"""Browse webnote files and the index in a web browser."""

from pathlib import Path

from flask import Flask, abort, render_template_string

from .config import Config
from .exceptions import WebnotesError
from .files import WEBNOTE_SUFFIX, find_webnote_files
from .index import AUTHORS, HOSTS, LISTING_NAME, TAG_INDEX, IndexEntry, load_index_file, name_from_index
from .models import Document, Section
from .parser import load_document
from .render import body_to_html
from .utils import content_hash

BROWSABLE_INDEXES = (AUTHORS, HOSTS, TAG_INDEX)

_LAYOUT = """<html><head><title>webnotes</title></head><body>
<a href="/">main</a> | {{ heading }}
__CONTENT__
</body></html>
"""

MESSAGE_PAGE = _LAYOUT.replace("__CONTENT__\n", "")

MAIN_PAGE = _LAYOUT.replace("__CONTENT__", """<hr>
{% for name in links %}<p><a href="/{{ name }}">{{ name }}</a></p>
{% endfor %}""")

LIST_PAGE = _LAYOUT.replace("__CONTENT__", """<hr>
{% for href, text in items %}<p><a href="{{ href }}">{{ text }}</a></p>
{% endfor %}""")

DOCUMENT_PAGE = _LAYOUT.replace("__CONTENT__", """
{% for s in sections %}<hr>
{% if s.note %}<p><a id="{{ s.anchor }}" href="{{ url_path }}#{{ s.anchor }}">#</a> note://{{ s.note }}</p>
{% else %}<p><a id="{{ s.anchor }}" href="{{ url_path }}#{{ s.anchor }}">#</a> <a href="{{ s.url }}">{{ s.url }}</a></p>
{% endif %}{% for name, values in s.fields %}<p>{{ name }}: {% if name == "tags" %}{% for tag in values %}<a href="/tags/{{ tag_hash(tag) }}">{{ tag }}</a>{% if not loop.last %}, {% endif %}{% endfor %}{% else %}{{ values | join(", ") }}{% endif %}</p>
{% endfor %}{% if s.body %}{{ s.body | safe }}
{% endif %}{% endfor %}""")


def _section_view(section: Section) -> dict:
    return {
        "note": section.note,
        "url": section.url,
        "anchor": section.note or content_hash(section.url),
        "fields": [(f.name, f.values) for f in section.fields],
        "body": body_to_html(section.body) if section.body else "",
    }


def create_app(config: Config) -> Flask:
    """Create the browsing app for the webnote files under config.root."""
    app = Flask(__name__)
    root = Path(config.root).resolve()
    indexes: dict[str, list[IndexEntry]] = {}

    def index_entries(name: str) -> list[IndexEntry]:
        if name not in indexes:
            indexes[name] = load_index_file(config.index_root / name / LISTING_NAME)
        return indexes[name]

    def document_page(document: Document, url_path: str, heading: str) -> str:
        return render_template_string(
            DOCUMENT_PAGE,
            heading=heading,
            url_path=url_path,
            sections=[_section_view(s) for s in document.sections],
            tag_hash=content_hash,
        )

    @app.after_request
    def disable_caching(response):
        response.headers["Cache-Control"] = "no-cache, private, max-age=0"
        response.headers["Expires"] = "Thu, 01 Jan 1970 00:00:00 GMT"
        response.headers["Pragma"] = "no-cache"
        response.headers["X-Accel-Expires"] = "0"
        return response

    @app.errorhandler(WebnotesError)
    @app.errorhandler(OSError)
    def message_page(error):
        return render_template_string(MESSAGE_PAGE, heading=str(error))

    @app.errorhandler(404)
    def not_found(error):
        return render_template_string(MESSAGE_PAGE, heading="Invalid url"), 404

    @app.route("/")
    def main_page():
        return render_template_string(MAIN_PAGE, heading="main", links=[AUTHORS, HOSTS, "files", TAG_INDEX])

    @app.route("/files")
    def files_page():
        files = [p.as_posix() for p in find_webnote_files(root, config.index_path)]
        items = [(f"/file/{f}", f) for f in files]
        return render_template_string(LIST_PAGE, heading="files", items=items)

    @app.route("/file/<path:file_path>")
    def file_page(file_path: str):
        path = (root / file_path).resolve()
        if not path.is_relative_to(root) or path.suffix != WEBNOTE_SUFFIX:
            abort(404)
        document = load_document(path)
        return document_page(document, f"/file/{file_path}", f"file: {file_path}")

    @app.route("/<index_name>")
    def index_page(index_name: str):
        if index_name not in BROWSABLE_INDEXES:
            abort(404)
        items = [(f"/{index_name}/{e.content_hash}", e.name) for e in index_entries(index_name)]
        return render_template_string(LIST_PAGE, heading=index_name, items=items)

    @app.route("/<index_name>/<key>")
    def index_file_page(index_name: str, key: str):
        if index_name not in BROWSABLE_INDEXES:
            abort(404)
        name = name_from_index(index_entries(index_name), key)
        document = load_document(config.index_root / index_name / f"{key}{WEBNOTE_SUFFIX}")
        return document_page(document, f"/{index_name}/{key}", f"{index_name[:-1]}: {name}")

    return app
