"""
HTTP/1.1 connection implementation for http_dispatch.

This module implements the HTTP11Connection class that performs one
HTTP/1.1 request/response exchange over a NetworkStream using h11.
Connections are single use: they close once the response body has been
read or an error occurred.
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import h11

from .http_primitives import Request, Response
from .network.stream import NetworkStream
from .exceptions import ConnectionError, ProtocolError

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """States of an HTTP/1.1 connection."""
    NEW = "new"           # Connection created, not yet used
    ACTIVE = "active"     # Connection handling its request
    CLOSED = "closed"     # Connection closed, cannot be reused


class HTTP11Connection:
    """
    Single-exchange HTTP/1.1 connection.

    Sends one request, buffers the whole response body and closes the
    underlying stream.
    """

    DEFAULT_READ_TIMEOUT = 30.0
    DEFAULT_WRITE_TIMEOUT = 30.0
    READ_CHUNK_SIZE = 65536

    def __init__(
        self,
        stream: NetworkStream,
        read_timeout: Optional[float] = None,
        write_timeout: Optional[float] = None,
    ):
        """
        Initialize HTTP/1.1 connection.

        Args:
            stream: The NetworkStream to use for communication
            read_timeout: Timeout for each read operation in seconds
            write_timeout: Timeout for each write operation in seconds
        """
        self._stream = stream
        self._h11_connection = h11.Connection(h11.CLIENT)
        self._state = ConnectionState.NEW

        self._read_timeout = read_timeout or self.DEFAULT_READ_TIMEOUT
        self._write_timeout = write_timeout or self.DEFAULT_WRITE_TIMEOUT

        # Metrics
        self._bytes_sent = 0
        self._bytes_received = 0
        self._request_time = 0.0

    async def handle_request(self, request: Request) -> Response:
        """
        Handle a complete HTTP request/response cycle.

        Args:
            request: The HTTP request to send. It must carry a Host header
                and a Content-Length header when it has a body.

        Returns:
            The HTTP response with its body fully read

        Raises:
            ConnectionError: If the connection was already used
            ProtocolError: If the peer closes early or violates HTTP/1.1
            h11.LocalProtocolError: If the request cannot be framed
            asyncio.TimeoutError: If a read or write times out
        """
        if self._state != ConnectionState.NEW:
            raise ConnectionError(f"Connection is {self._state.value}")
        self._state = ConnectionState.ACTIVE

        start_time = time.monotonic()
        try:
            await self._send_request(request)
            response = await self._receive_response()
        except asyncio.TimeoutError:
            logger.error(
                f"{request.method} {request.url} timed out after "
                f"{time.monotonic() - start_time:.3f}s"
            )
            raise
        except Exception as e:
            logger.error(
                f"{request.method} {request.url} failed: {e!r} "
                f"({time.monotonic() - start_time:.3f}s)"
            )
            raise
        finally:
            self._request_time = time.monotonic() - start_time
            await self.close()

        logger.debug(
            f"{request.method} {request.url} -> {response.status_code} "
            f"({self._request_time:.3f}s)"
        )
        return response

    async def _send_request(self, request: Request) -> None:
        h11_request = h11.Request(
            method=request.method,
            target=request.target,
            headers=list(request.headers.items()),
        )
        await self._send_event(h11_request)

        if request.body:
            await self._send_event(h11.Data(data=request.body))

        await self._send_event(h11.EndOfMessage())

    async def _send_event(self, event: h11.Event) -> None:
        data = self._h11_connection.send(event)
        if data:
            await asyncio.wait_for(self._stream.write(data), timeout=self._write_timeout)
            self._bytes_sent += len(data)

    async def _next_event(self) -> Any:
        """Return the next h11 event, reading from the stream as needed."""
        while True:
            event = self._h11_connection.next_event()
            if event is not h11.NEED_DATA:
                return event

            data = await asyncio.wait_for(
                self._stream.read(self.READ_CHUNK_SIZE),
                timeout=self._read_timeout,
            )
            # an empty read tells h11 the peer closed the connection
            self._h11_connection.receive_data(data)
            self._bytes_received += len(data)

    async def _receive_response(self) -> Response:
        try:
            while True:
                event = await self._next_event()
                if isinstance(event, h11.InformationalResponse):
                    continue
                if isinstance(event, h11.Response):
                    break
                if isinstance(event, h11.ConnectionClosed):
                    raise ProtocolError("Connection closed before a response was received")

            headers: List[Tuple[bytes, bytes]] = [
                (bytes(name), bytes(value)) for name, value in event.headers
            ]
            chunks: List[bytes] = []
            while True:
                body_event = await self._next_event()
                if isinstance(body_event, h11.Data):
                    chunks.append(bytes(body_event.data))
                elif isinstance(body_event, h11.EndOfMessage):
                    break
                elif isinstance(body_event, h11.ConnectionClosed):
                    raise ProtocolError("Connection closed while reading the body")
        except h11.RemoteProtocolError as e:
            raise ProtocolError(str(e), cause=e) from e

        return Response.create(
            status_code=event.status_code,
            headers=headers,
            content=b"".join(chunks),
            extensions={"http_version": bytes(event.http_version)},
        )

    async def close(self) -> None:
        """Close the connection and cleanup resources."""
        if self._state != ConnectionState.CLOSED:
            self._state = ConnectionState.CLOSED
            await self._stream.aclose()

    @property
    def is_closed(self) -> bool:
        """Check if connection is closed."""
        return self._state == ConnectionState.CLOSED

    @property
    def metrics(self) -> Dict[str, Any]:
        """Byte counts and timing of the exchange."""
        return {
            "bytes_sent": self._bytes_sent,
            "bytes_received": self._bytes_received,
            "request_time": self._request_time,
            "state": self._state.value,
        }
