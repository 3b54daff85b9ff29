"""
Custom exceptions for http_dispatch.

This module defines two hierarchies:

* ``TransportError`` and its subclasses, raised by the HTTP client when a
  round trip cannot be completed (connection, protocol, timeout failures).
* ``NetworkError`` and its closed set of variants, which the ``Dispatcher``
  raises to callers. Variants compare by value so callers and tests can
  match on them directly.
"""

from typing import Any, Optional, Tuple


class TransportError(Exception):
    """Base exception for all transport-level failures."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class ConnectionError(TransportError):
    """Raised when there's an error with network connections."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Connection error: {message}", cause)


class ProtocolError(TransportError):
    """Raised when there's an error with HTTP protocol handling."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Protocol error: {message}", cause)


class TimeoutError(TransportError):
    """Raised when an operation times out."""

    def __init__(
        self,
        message: str,
        timeout: Optional[float] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        if timeout is not None:
            message = f"{message} (timeout: {timeout}s)"
        super().__init__(f"Timeout error: {message}", cause)
        self.timeout = timeout


class NetworkError(Exception):
    """
    Base class of the dispatch error taxonomy.

    Instances are value objects: two errors are equal when they are the
    same variant and carry equal payloads.
    """

    description = "Network request failed"

    def __init__(self) -> None:
        super().__init__(self.description)

    def _payload(self) -> Tuple[Any, ...]:
        return ()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NetworkError):
            return NotImplemented
        return type(self) is type(other) and self._payload() == other._payload()

    def __hash__(self) -> int:
        return hash((type(self), self._payload()))

    def __repr__(self) -> str:
        payload = ", ".join(repr(value) for value in self._payload())
        return f"{type(self).__name__}({payload})"


class InvalidRequest(NetworkError):
    """The request could not be rendered and was never sent."""

    description = "Invalid request"


class BadRequest(NetworkError):
    """HTTP 400."""

    description = "Bad request"


class Unauthorized(NetworkError):
    """HTTP 401."""

    description = "Unauthorized"


class Forbidden(NetworkError):
    """HTTP 403."""

    description = "Forbidden"


class NotFound(NetworkError):
    """HTTP 404."""

    description = "Not found"


class _StatusCodeError(NetworkError):
    """A variant that preserves the HTTP status code."""

    def __init__(self, code: int) -> None:
        self.code = code
        Exception.__init__(self, f"{self.description} ({code})")

    def _payload(self) -> Tuple[Any, ...]:
        return (self.code,)


class Error4xx(_StatusCodeError):
    """HTTP 402 or 405-499."""

    description = "Client error"


class ServerError(NetworkError):
    """HTTP 500."""

    description = "Internal server error"


class Error5xx(_StatusCodeError):
    """HTTP 501-599."""

    description = "Server error"


class DecodingError(NetworkError):
    """A successful response body could not be decoded."""

    description = "Response decoding failed"


class TransportFailed(NetworkError):
    """The round trip failed below HTTP; ``underlying`` is the original error."""

    description = "Transport failed"

    def __init__(self, underlying: BaseException) -> None:
        self.underlying = underlying
        Exception.__init__(self, f"{self.description}: {underlying!r}")

    def _payload(self) -> Tuple[Any, ...]:
        return (type(self.underlying), _args_key(self.underlying))


class UnknownError(NetworkError):
    """Any failure outside the other variants, including 1xx/3xx statuses."""

    description = "Unknown error"


def _args_key(error: BaseException) -> Tuple[Any, ...]:
    # args may hold unhashable values; fall back to their reprs
    try:
        hash(error.args)
    except TypeError:
        return tuple(repr(arg) for arg in error.args)
    return error.args
