"""
http_dispatch - declarative HTTP requests with a closed error taxonomy

Describe a call with a RequestDescriptor, render it against a base URL
and let a Dispatcher send it, decode the body and classify failures.
"""

__version__ = "0.1.0"

from .http_primitives import Request, Response, URLComponents
from .request import (
    ContentType,
    HeaderField,
    HTTPMethod,
    RequestDescriptor,
    render,
)
from .decoders import Decoder, JSONDecoder
from .client import BaseHTTPClient, HTTPClient
from .dispatcher import Dispatcher, http_error
from .exceptions import (
    TransportError,
    ConnectionError,
    ProtocolError,
    TimeoutError,
    NetworkError,
    InvalidRequest,
    BadRequest,
    Unauthorized,
    Forbidden,
    NotFound,
    Error4xx,
    ServerError,
    Error5xx,
    DecodingError,
    TransportFailed,
    UnknownError,
)

__all__ = [
    "Request",
    "Response",
    "URLComponents",
    "ContentType",
    "HeaderField",
    "HTTPMethod",
    "RequestDescriptor",
    "render",
    "Decoder",
    "JSONDecoder",
    "BaseHTTPClient",
    "HTTPClient",
    "Dispatcher",
    "http_error",
    "TransportError",
    "ConnectionError",
    "ProtocolError",
    "TimeoutError",
    "NetworkError",
    "InvalidRequest",
    "BadRequest",
    "Unauthorized",
    "Forbidden",
    "NotFound",
    "Error4xx",
    "ServerError",
    "Error5xx",
    "DecodingError",
    "TransportFailed",
    "UnknownError",
]
