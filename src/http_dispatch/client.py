"""
HTTP client for http_dispatch.

``BaseHTTPClient`` is the interface the Dispatcher depends on: given a
transport Request, return a Response or raise. ``HTTPClient`` implements it
on top of a NetworkBackend and HTTP11Connection, opening one connection
per request.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

import h11

from .http11 import HTTP11Connection
from .http_primitives import Request, Response, URLComponents
from .network import AsyncioNetworkBackend, NetworkBackend, NetworkStream, format_host_header
from .exceptions import ConnectionError, ProtocolError, TimeoutError

logger = logging.getLogger(__name__)


class BaseHTTPClient(ABC):
    """Interface for clients a Dispatcher can send requests through."""

    @abstractmethod
    async def send(self, request: Request) -> Response:
        """
        Send ``request`` and return the buffered response.

        Raises:
            TransportError: If no HTTP response could be obtained.
        """

    async def aclose(self) -> None:
        """Release client resources. The base implementation holds none."""

    async def __aenter__(self) -> "BaseHTTPClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


class HTTPClient(BaseHTTPClient):
    """
    HTTP/1.1 client over a NetworkBackend.

    Every request opens its own connection, so one client can serve any
    number of concurrent sends.
    """

    DEFAULT_CONNECT_TIMEOUT = 10.0
    DEFAULT_READ_TIMEOUT = 30.0
    DEFAULT_WRITE_TIMEOUT = 30.0
    DEFAULT_USER_AGENT = "http_dispatch/0.1.0"

    def __init__(
        self,
        backend: Optional[NetworkBackend] = None,
        connect_timeout: Optional[float] = None,
        read_timeout: Optional[float] = None,
        write_timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
    ):
        """
        Initialize the client.

        Args:
            backend: Network backend to open connections with
                (``AsyncioNetworkBackend`` when omitted)
            connect_timeout: Timeout for TCP connect and TLS handshake
            read_timeout: Timeout for each read in seconds
            write_timeout: Timeout for each write in seconds
            user_agent: Value of the User-Agent header added when absent
        """
        self._backend = backend or AsyncioNetworkBackend()
        self._connect_timeout = connect_timeout or self.DEFAULT_CONNECT_TIMEOUT
        self._read_timeout = read_timeout or self.DEFAULT_READ_TIMEOUT
        self._write_timeout = write_timeout or self.DEFAULT_WRITE_TIMEOUT
        self._user_agent = user_agent or self.DEFAULT_USER_AGENT

    async def send(self, request: Request) -> Response:
        """
        Send a request over a fresh connection.

        Raises:
            ValueError: If the request URL is not an absolute http(s) URL
            ConnectionError: If connecting or transferring fails
            TimeoutError: If connecting, reading or writing times out
            ProtocolError: If the exchange violates HTTP/1.1
        """
        components = request.components
        if components.scheme not in ("http", "https"):
            raise ValueError(f"Unsupported URL scheme: {components.scheme!r}")

        prepared = request.with_headers(self._prepare_headers(request, components))
        stream: Optional[NetworkStream] = None
        try:
            stream = await self._backend.connect_tcp(
                components.host, components.port, timeout=self._connect_timeout
            )
            if components.scheme == "https":
                stream = await self._backend.connect_tls(
                    stream,
                    components.host,
                    components.port,
                    timeout=self._connect_timeout,
                    alpn_protocols=["http/1.1"],
                )
            connection = HTTP11Connection(
                stream,
                read_timeout=self._read_timeout,
                write_timeout=self._write_timeout,
            )
            return await connection.handle_request(prepared)
        except asyncio.TimeoutError as e:
            raise TimeoutError(f"{request.method} {request.url}", cause=e) from e
        except h11.ProtocolError as e:
            raise ProtocolError(str(e), cause=e) from e
        except OSError as e:
            raise ConnectionError(f"{request.method} {request.url}: {e}", cause=e) from e
        finally:
            if stream is not None and not stream.is_closed:
                await stream.aclose()

    def _prepare_headers(self, request: Request, components: URLComponents) -> Dict[str, str]:
        """Add Host, User-Agent and Content-Length when the caller did not."""
        headers = dict(request.headers)
        if not request.has_header("Host"):
            headers["Host"] = format_host_header(
                components.host, components.port, components.scheme
            )
        if not request.has_header("User-Agent"):
            headers["User-Agent"] = self._user_agent
        if request.body is not None and not request.has_header("Content-Length"):
            headers["Content-Length"] = str(len(request.body))
        return headers
