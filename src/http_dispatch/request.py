"""
Request descriptors for http_dispatch.

A ``RequestDescriptor`` is the caller's declarative description of one HTTP
call. ``render`` turns it into a transport ``Request`` against a base URL.
Endpoint-specific requests subclass the descriptor and override defaults:

    @dataclass
    class ListTodos(RequestDescriptor[List[Todo]]):
        path: str = "/todos"
        response_type: Any = List[Todo]
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import (
    Any,
    Dict,
    Generic,
    List,
    Mapping,
    Optional,
    Tuple,
    TypeVar,
    Union,
)
from urllib.parse import quote, urlencode, urlsplit, urlunsplit

from .decoders import Decoder
from .http_primitives import Request

logger = logging.getLogger(__name__)

T = TypeVar("T")

ParamValue = Union[str, int, float, bool, None]
Params = Mapping[str, ParamValue]
HTTPHeaders = Mapping[str, str]

PATH_SAFE = "/%:@!$&'()*+,;=-._~"


class ContentType(str, Enum):
    """Supported request and accept content types."""
    JSON = "application/json"
    URL_ENCODED = "application/x-www-form-urlencoded"


class HeaderField(str, Enum):
    """Header names this library sets or documents."""
    AUTHORIZATION = "Authorization"
    CONTENT_TYPE = "Content-Type"
    ACCEPT = "Accept"
    ACCEPT_ENCODING = "Accept-Encoding"


class HTTPMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


def param_to_str(value: ParamValue) -> str:
    """String form of a parameter value for query strings and form bodies."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def encode_params(params: Params) -> str:
    """Join parameters with standard URL query encoding, in mapping order."""
    items: List[Tuple[str, str]] = [
        (name, param_to_str(value)) for name, value in params.items()
    ]
    return urlencode(items, quote_via=quote)


@dataclass
class RequestDescriptor(Generic[T]):
    """
    Declarative description of one HTTP call.

    ``url`` overrides ``path``, the base URL and ``query_params`` entirely.
    Caller ``headers`` take precedence over the default ``Content-Type`` and
    ``Accept`` headers derived from ``content_type`` and ``accept_type``.
    """

    path: str = ""
    url: Optional[str] = None
    method: HTTPMethod = HTTPMethod.GET
    content_type: ContentType = ContentType.JSON
    accept_type: ContentType = ContentType.JSON
    query_params: Optional[Params] = None
    body: Optional[Mapping[str, Any]] = None
    headers: Optional[HTTPHeaders] = None
    response_type: Any = Any
    decoder: Optional[Decoder] = None

    def render(self, base_url: str) -> Optional[Request]:
        """Render this descriptor into a transport request, or None."""
        return render(self, base_url)

    def default_headers(self) -> Dict[str, str]:
        return {
            HeaderField.CONTENT_TYPE.value: ContentType(self.content_type).value,
            HeaderField.ACCEPT.value: ContentType(self.accept_type).value,
        }

    def merged_headers(self) -> Dict[str, str]:
        """Caller headers with the defaults filling names not already present."""
        headers = dict(self.headers or {})
        present = {name.lower() for name in headers}
        for name, value in self.default_headers().items():
            if name.lower() not in present:
                headers[name] = value
        return headers

    def encoded_body(self) -> Optional[bytes]:
        """
        Serialize ``body`` according to ``content_type``.

        Raises:
            TypeError: If a JSON body holds values json cannot serialize.
            ValueError: If a JSON body holds NaN/infinity or circular values.
        """
        if self.body is None:
            return None
        if ContentType(self.content_type) is ContentType.URL_ENCODED:
            return encode_params(self.body).encode("utf-8")
        return json.dumps(dict(self.body), allow_nan=False).encode("utf-8")


def _is_absolute(parts) -> bool:
    return parts.scheme in ("http", "https") and bool(parts.hostname)


def _is_wire_safe(text: Any) -> bool:
    return not isinstance(text, str) or (
        text.isascii() and "\r" not in text and "\n" not in text
    )


def _is_sendable_url(url: str) -> bool:
    return url.isascii() and not any(ch.isspace() or ord(ch) < 0x20 for ch in url)


def build_url(base_url: str, path: str, query_params: Optional[Params]) -> Optional[str]:
    """
    Append ``path`` to the path of ``base_url`` and add ``query_params``.

    ``path`` is percent-encoded, leaving already-escaped sequences alone.
    A query already on ``base_url`` is kept and ``query_params`` follow it,
    so API keys pinned to the base URL survive every call.

    Returns None when ``base_url`` is not an absolute http(s) URL.
    """
    try:
        parts = urlsplit(base_url)
        absolute = _is_absolute(parts)
    except ValueError as exc:
        logger.debug(f"Unparseable base URL {base_url!r}: {exc}")
        return None
    if not absolute:
        logger.debug(f"Base URL {base_url!r} is not an absolute http(s) URL")
        return None

    query = parts.query
    if query_params:
        extra = encode_params(query_params)
        query = f"{query}&{extra}" if query else extra

    full_path = f"{parts.path}{quote(path, safe=PATH_SAFE)}"
    return urlunsplit((parts.scheme, parts.netloc, full_path, query, ""))


def render(descriptor: RequestDescriptor, base_url: str) -> Optional[Request]:
    """
    Render ``descriptor`` into a transport Request against ``base_url``.

    Returns None when no usable URL can be derived, or when the method,
    content types, headers or body are invalid. Header names and values
    must be ASCII without line breaks. Rendering never performs I/O and
    never raises for bad input.
    """
    if descriptor.url is not None:
        try:
            absolute = _is_absolute(urlsplit(descriptor.url))
        except ValueError:
            absolute = False
        if not absolute:
            logger.debug(f"Absolute URL {descriptor.url!r} is not usable")
            return None
        final_url: Optional[str] = descriptor.url
    else:
        final_url = build_url(base_url, descriptor.path, descriptor.query_params)
    if final_url is None:
        return None
    if not _is_sendable_url(final_url):
        logger.debug(f"URL {final_url!r} contains characters that cannot be sent")
        return None

    headers = descriptor.merged_headers()
    for name, value in headers.items():
        if not (_is_wire_safe(name) and _is_wire_safe(value)):
            logger.debug(f"Header {name!r} cannot be sent on the wire")
            return None

    try:
        return Request(
            method=HTTPMethod(descriptor.method).value,
            url=final_url,
            headers=headers,
            body=descriptor.encoded_body(),
        )
    except (TypeError, ValueError) as exc:
        logger.debug(f"Cannot render {descriptor.method} {final_url}: {exc}")
        return None
