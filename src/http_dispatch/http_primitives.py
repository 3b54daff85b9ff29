"""
HTTP primitives for http_dispatch.

This module defines the transport-level data structures: the rendered
request handed to an HTTP client and the response it produces.
All classes are immutable to ensure safe sharing between coroutines.
"""

from typing import (
    Any,
    Dict,
    List,
    Mapping,
    NamedTuple,
    Optional,
    Tuple,
    Union,
)
from dataclasses import dataclass, field
from urllib.parse import urlsplit


# Type aliases for better readability
Headers = List[Tuple[bytes, bytes]]
StatusCode = int


class URLComponents(NamedTuple):
    """Immutable representation of the parts of a URL a client needs."""
    scheme: str
    host: str
    port: int
    target: str

    @classmethod
    def from_url(cls, url: str) -> "URLComponents":
        """
        Create URLComponents from an absolute URL string.

        Raises:
            ValueError: If the URL has no host or an invalid port
        """
        parsed = urlsplit(url)
        scheme = parsed.scheme or "http"
        host = parsed.hostname or ""
        if not host:
            raise ValueError(f"No hostname found in URL: {url!r}")
        port = parsed.port or (443 if scheme == "https" else 80)
        target = parsed.path or "/"
        if parsed.query:
            target = f"{target}?{parsed.query}"

        return cls(scheme=scheme, host=host, port=port, target=target)


@dataclass(frozen=True)
class Request:
    """
    Immutable transport request.

    A fully rendered HTTP request: method, absolute URL, header mapping
    and raw body bytes. Any change produces a new Request instance.
    """

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None

    def __post_init__(self) -> None:
        """Validate request data after initialization."""
        if not isinstance(self.method, str) or not self.method:
            raise ValueError("method must be a non-empty str")

        if not isinstance(self.url, str):
            raise ValueError("url must be a str")

        if not isinstance(self.headers, dict):
            raise ValueError("headers must be a dict")

        for name, value in self.headers.items():
            if not isinstance(name, str) or not isinstance(value, str):
                raise ValueError("header names and values must be str")

        if self.body is not None and not isinstance(self.body, bytes):
            raise ValueError("body must be bytes or None")

    @classmethod
    def create(
        cls,
        method: Union[str, bytes],
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[Union[str, bytes]] = None,
    ) -> "Request":
        """
        Create a Request with proper type conversion.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: Absolute URL string
            headers: Optional mapping of header names to values
            body: Optional request body; str is encoded as UTF-8

        Returns:
            New Request instance
        """
        if isinstance(method, bytes):
            method = method.decode("ascii")

        if isinstance(body, str):
            body = body.encode("utf-8")

        return cls(
            method=method.upper(),
            url=url,
            headers=dict(headers or {}),
            body=body,
        )

    def with_method(self, method: str) -> "Request":
        """Create a new request with a different method."""
        return Request(method=method, url=self.url, headers=self.headers, body=self.body)

    def with_url(self, url: str) -> "Request":
        """Create a new request with a different URL."""
        return Request(method=self.method, url=url, headers=self.headers, body=self.body)

    def with_headers(self, headers: Mapping[str, str]) -> "Request":
        """Create a new request with different headers."""
        return Request(method=self.method, url=self.url, headers=dict(headers), body=self.body)

    def with_body(self, body: Optional[bytes]) -> "Request":
        """Create a new request with a different body."""
        return Request(method=self.method, url=self.url, headers=self.headers, body=body)

    def add_header(self, name: str, value: str) -> "Request":
        """Add a header to the request, replacing any header of the same name."""
        new_headers = {
            key: existing
            for key, existing in self.headers.items()
            if key.lower() != name.lower()
        }
        new_headers[name] = value
        return self.with_headers(new_headers)

    def get_header(self, name: str) -> Optional[str]:
        """Get a header value by name (case-insensitive)."""
        name_lower = name.lower()
        for header_name, header_value in self.headers.items():
            if header_name.lower() == name_lower:
                return header_value
        return None

    def has_header(self, name: str) -> bool:
        """Check if a header exists (case-insensitive)."""
        return self.get_header(name) is not None

    @property
    def components(self) -> URLComponents:
        """Parsed URL components used to open a connection."""
        return URLComponents.from_url(self.url)

    @property
    def scheme(self) -> str:
        """Get the URL scheme."""
        return self.components.scheme

    @property
    def host(self) -> str:
        """Get the URL host."""
        return self.components.host

    @property
    def port(self) -> int:
        """Get the URL port."""
        return self.components.port

    @property
    def target(self) -> str:
        """Get the request target (path and query)."""
        return self.components.target


@dataclass(frozen=True)
class Response:
    """
    Immutable HTTP response representation.

    The body is fully buffered in ``content``; responses are never streamed.
    """

    status_code: StatusCode
    headers: Headers = field(default_factory=list)
    content: bytes = b""
    extensions: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate response data after initialization."""
        if not isinstance(self.status_code, int):
            raise ValueError("status_code must be int")

        if not isinstance(self.headers, list):
            raise ValueError("headers must be a list")

        for name, value in self.headers:
            if not isinstance(name, bytes) or not isinstance(value, bytes):
                raise ValueError("header names and values must be bytes")

        if not isinstance(self.content, bytes):
            raise ValueError("content must be bytes")

        if not isinstance(self.extensions, dict):
            raise ValueError("extensions must be a dict")

    @classmethod
    def create(
        cls,
        status_code: StatusCode,
        headers: Optional[Headers] = None,
        content: bytes = b"",
        extensions: Optional[Dict[str, Any]] = None,
    ) -> "Response":
        """
        Create a Response with proper validation.

        Args:
            status_code: HTTP status code
            headers: Optional list of (name, value) header tuples
            content: Response body bytes
            extensions: Optional dict for additional data

        Returns:
            New Response instance
        """
        return cls(
            status_code=status_code,
            headers=list(headers or []),
            content=content,
            extensions=dict(extensions or {}),
        )

    def get_header(self, name: Union[str, bytes]) -> Optional[bytes]:
        """Get a header value by name (case-insensitive)."""
        if isinstance(name, str):
            name = name.encode()

        name_lower = name.lower()
        for header_name, header_value in self.headers:
            if header_name.lower() == name_lower:
                return header_value

        return None

    def has_header(self, name: Union[str, bytes]) -> bool:
        """Check if a header exists (case-insensitive)."""
        return self.get_header(name) is not None

    @property
    def is_success(self) -> bool:
        """True for 2xx status codes."""
        return 200 <= self.status_code <= 299
