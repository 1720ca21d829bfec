"""HTTP GET/HEAD for bookmark sections.

Outcomes are recorded on the section: an HTTP status other than 200 goes to
the ``status`` field and a transport failure to the ``error`` field.
"""

from http.client import HTTPException
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from bs4 import BeautifulSoup

from .exceptions import FetchError
from .models import Section

USER_AGENT = "webnotes/0.1 (+https://pypi.org/project/webnotes/)"
DEFAULT_TIMEOUT = 30.0


def _request(url: str, method: str) -> Request:
    return Request(url, method=method, headers={"User-Agent": USER_AGENT})


def _status_line(code: int, reason: str) -> str:
    return f"{code} {reason}".strip()


def get_page(section: Section, timeout: float = DEFAULT_TIMEOUT) -> BeautifulSoup:
    """Fetch and parse the page of a bookmark section.

    Returns the parsed page on a 200 response.

    Raises:
        FetchError: if the section has no URL, the server answered with another
            status (recorded as ``status``), or the request failed (recorded as
            ``error``).
    """
    if not section.url:
        raise FetchError("Section does not have a url")
    try:
        with urlopen(_request(section.url, "GET"), timeout=timeout) as resp:
            status, reason = resp.status, resp.reason
            raw = resp.read()
            charset = resp.headers.get_content_charset() or "utf-8"
    except HTTPError as e:
        section.set_status(_status_line(e.code, e.reason))
        raise FetchError(f"Failed to get {section.url}: {e.code}") from e
    except (URLError, HTTPException, OSError, ValueError) as e:
        section.set_error(e)
        raise FetchError(f"Failed to get {section.url}: {e}") from e

    if status != 200:
        section.set_status(_status_line(status, reason))
        raise FetchError(f"Failed to get {section.url}: {status}")

    try:
        text = raw.decode(charset, errors="replace")
    except LookupError:
        text = raw.decode("utf-8", errors="replace")
    return BeautifulSoup(text, "html.parser")


def head(section: Section, timeout: float = DEFAULT_TIMEOUT) -> None:
    """Check that a bookmark is still reachable.

    A 200 response clears ``error`` and ``status``; anything else is recorded
    on the section.
    """
    if not section.url:
        section.set_error("Section does not have a url")
        return
    try:
        with urlopen(_request(section.url, "HEAD"), timeout=timeout) as resp:
            status, reason = resp.status, resp.reason
    except HTTPError as e:
        section.set_status(_status_line(e.code, e.reason))
        return
    except (URLError, HTTPException, OSError, ValueError) as e:
        section.set_error(e)
        return

    if status == 200:
        section.delete_fields("error", "status")
    else:
        section.set_status(_status_line(status, reason))
