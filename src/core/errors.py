"""Error taxonomy.

Transport-level errors carry the URL that failed. Nothing here is
translated by a global layer: callers of the facade see these classes
as raised.
"""

from __future__ import annotations


class WordPressError(RuntimeError):
    """Base class for every error raised by this library."""


class ConfigurationError(WordPressError):
    """Raised when the client is used without a base URL."""


class TransportError(WordPressError):
    """A GET against the REST API failed."""

    def __init__(self, message: str, *, url: str) -> None:
        super().__init__(message)
        self.url = url


class NetworkError(TransportError):
    """DNS, connection or protocol failure below HTTP."""


class RequestTimeoutError(TransportError, TimeoutError):
    """The request did not complete within the configured timeout."""


class HttpError(TransportError):
    """Non-2xx response after retries were exhausted."""

    def __init__(self, message: str, *, url: str, status_code: int) -> None:
        super().__init__(message, url=url)
        self.status_code = status_code


class ParseError(TransportError):
    """A 2xx response body was not valid JSON."""


class NotFoundError(WordPressError):
    """A slug lookup returned no records."""

    def __init__(self, resource: str, lookup: str) -> None:
        super().__init__(f"{resource} not found: {lookup}")
        self.resource = resource
        self.lookup = lookup
