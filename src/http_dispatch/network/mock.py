"""
Mock network implementations for testing.

This module provides in-memory implementations of NetworkStream and
NetworkBackend so the HTTP client can be exercised without real sockets.
"""

from collections import defaultdict, deque
from typing import Any, Deque, Dict, List, Optional, Tuple

from .backend import NetworkBackend
from .stream import NetworkStream


class MockNetworkStream(NetworkStream):
    """
    Mock network stream for testing.

    Reads are served from a preloaded buffer; writes are recorded.
    """

    def __init__(self, data: bytes = b""):
        """
        Initialize the mock stream.

        Args:
            data: Initial data to be available for reading.
        """
        self._data = data
        self._position = 0
        self._closed = False
        self._extra_info: Dict[str, Any] = {}
        self._write_buffer: List[bytes] = []

    async def read(self, max_bytes: Optional[int] = None) -> bytes:
        if self._closed:
            raise RuntimeError("Stream is closed")

        if self._position >= len(self._data):
            return b""

        if max_bytes is None:
            result = self._data[self._position:]
            self._position = len(self._data)
        else:
            end = min(self._position + max_bytes, len(self._data))
            result = self._data[self._position:end]
            self._position = end

        return result

    async def write(self, data: bytes) -> None:
        if self._closed:
            raise RuntimeError("Stream is closed")

        self._write_buffer.append(data)

    async def aclose(self) -> None:
        self._closed = True

    def get_extra_info(self, name: str) -> Optional[Any]:
        return self._extra_info.get(name)

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def written_data(self) -> bytes:
        """Get all data that was written to the stream."""
        return b"".join(self._write_buffer)

    def set_extra_info(self, name: str, value: Any) -> None:
        self._extra_info[name] = value

    def add_data(self, data: bytes) -> None:
        """Add data to be available for reading."""
        self._data += data


class MockNetworkBackend(NetworkBackend):
    """
    Mock network backend for testing.

    Each ``connect_tcp`` call returns a fresh MockNetworkStream preloaded
    with the next response queued for that host and port. Errors queued
    with ``fail_next_connect`` are raised instead.
    """

    def __init__(self):
        self._responses: Dict[Tuple[str, int], Deque[bytes]] = defaultdict(deque)
        self._errors: Dict[Tuple[str, int], Deque[BaseException]] = defaultdict(deque)
        self.streams: List[MockNetworkStream] = []
        self.tls_hosts: List[str] = []

    def queue_response(self, host: str, port: int, data: bytes) -> None:
        """Queue raw response bytes for the next connection to host:port."""
        self._responses[(host, port)].append(data)

    def fail_next_connect(self, host: str, port: int, error: BaseException) -> None:
        """Make the next connection attempt to host:port raise ``error``."""
        self._errors[(host, port)].append(error)

    async def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None
    ) -> MockNetworkStream:
        key = (host, port)
        if self._errors[key]:
            raise self._errors[key].popleft()

        data = self._responses[key].popleft() if self._responses[key] else b""
        stream = MockNetworkStream(data)
        stream.set_extra_info("peername", key)
        stream.set_extra_info("sockname", ("127.0.0.1", 12345))
        self.streams.append(stream)
        return stream

    async def connect_tls(
        self,
        stream: MockNetworkStream,
        host: str,
        port: int,
        timeout: Optional[float] = None,
        alpn_protocols: Optional[List[str]] = None,
    ) -> MockNetworkStream:
        stream.set_extra_info("ssl_object", True)
        stream.set_extra_info(
            "selected_alpn_protocol",
            alpn_protocols[0] if alpn_protocols else "http/1.1",
        )
        self.tls_hosts.append(host)
        return stream

    @property
    def last_stream(self) -> Optional[MockNetworkStream]:
        """The most recently opened stream, if any."""
        return self.streams[-1] if self.streams else None

    def reset(self) -> None:
        """Reset all queued responses and recorded streams."""
        self._responses.clear()
        self._errors.clear()
        self.streams.clear()
        self.tls_hosts.clear()
