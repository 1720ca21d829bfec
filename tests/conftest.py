"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest
from click.testing import CliRunner

SAMPLE_NOTE = """# note://My First Note
title: Hello World
tags: b,a,a

Some body text.
"""

READING = """# note://reading_list
title: Reading list
tags: reading

Things to read.

# https://example.com/article
title: An article
author: Ann Author
tags: python,web

Notes on the article.

# https://docs.python.org/3/library/re.html
title: re module
tags: python
"""

LINKS = """# https://example.com/other
author: Ann Author
status: 404 Not Found

# http://blog.example.org/post
title: A post
tags: web
"""


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep WEBNOTES_* settings from the developer's environment out of tests."""
    for name in (
        "WEBNOTES_ROOT",
        "WEBNOTES_INDEX_PATH",
        "WEBNOTES_HTTP_HOST",
        "WEBNOTES_HTTP_PORT",
        "WEBNOTES_HTTP_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("webnotes.config.load_dotenv", lambda: False)


@pytest.fixture
def notes_root(tmp_path: Path) -> Path:
    """A small tree of webnote files."""
    root = tmp_path / "notes"
    (root / "sub").mkdir(parents=True)
    (root / "reading.wn").write_text(READING, encoding="utf-8")
    (root / "sub" / "links.wn").write_text(LINKS, encoding="utf-8")
    (root / "ignored.txt").write_text("not a webnote\n", encoding="utf-8")
    return root


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def run(runner: CliRunner, notes_root: Path):
    """Invoke the CLI against notes_root."""
    from webnotes.cli import main

    def invoke(*args: str):
        return runner.invoke(main, ["--root", str(notes_root), *args])

    return invoke
