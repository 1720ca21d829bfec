"""Custom exceptions for webnotes."""

from typing import Optional


class WebnotesError(Exception):
    """Base exception for webnotes."""


class ConfigError(WebnotesError):
    """Raised when configuration or command options are missing or invalid."""


class MatcherError(ConfigError):
    """Raised when section selection criteria conflict or are invalid."""


class SectionError(WebnotesError):
    """Raised when a section is constructed without exactly one identity."""


class ParseError(WebnotesError):
    """Raised when a webnote file does not follow the file grammar."""

    def __init__(self, reason: str, line_number: int, path: Optional[str] = None):
        self.reason = reason
        self.line_number = line_number
        self.path = path
        message = f"{reason} on line {line_number}"
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


class IndexBuildError(WebnotesError):
    """Raised when the index cannot be rebuilt."""


class FetchError(WebnotesError):
    """Raised when fetching a bookmark's page fails."""
