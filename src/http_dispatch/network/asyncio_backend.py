"""
asyncio network backend.

The default backend used by ``HTTPClient``: TCP connections are opened with
``asyncio.open_connection`` and upgraded in place with
``StreamWriter.start_tls``.
"""

import asyncio
import logging
import ssl
from typing import Any, List, Optional

from .backend import NetworkBackend
from .stream import NetworkStream
from .utils import create_ssl_context

logger = logging.getLogger(__name__)


class AsyncioNetworkStream(NetworkStream):
    """NetworkStream over an asyncio StreamReader/StreamWriter pair."""

    DEFAULT_READ_SIZE = 65536

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._reader = reader
        self._writer = writer
        self._closed = False

    async def read(self, max_bytes: Optional[int] = None) -> bytes:
        if self._closed:
            raise RuntimeError("Stream is closed")
        return await self._reader.read(max_bytes or self.DEFAULT_READ_SIZE)

    async def write(self, data: bytes) -> None:
        if self._closed:
            raise RuntimeError("Stream is closed")
        self._writer.write(data)
        await self._writer.drain()

    async def start_tls(
        self,
        context: ssl.SSLContext,
        server_hostname: str,
    ) -> "AsyncioNetworkStream":
        await self._writer.start_tls(context, server_hostname=server_hostname)
        return self

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except (OSError, ssl.SSLError) as exc:
            # the peer may already have reset the connection
            logger.debug(f"Error while closing stream: {exc}")

    def get_extra_info(self, name: str) -> Optional[Any]:
        if name == "ssl_object":
            return self._writer.get_extra_info("ssl_object") is not None
        return self._writer.get_extra_info(name)

    @property
    def is_closed(self) -> bool:
        return self._closed


class AsyncioNetworkBackend(NetworkBackend):
    """
    Network backend built on asyncio streams.

    Args:
        ssl_context: Context used for TLS upgrades. Defaults to
            ``create_ssl_context()`` negotiating ``http/1.1``.
    """

    def __init__(self, ssl_context: Optional[ssl.SSLContext] = None) -> None:
        self._ssl_context = ssl_context

    async def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None
    ) -> AsyncioNetworkStream:
        logger.debug(f"Opening TCP connection to {host}:{port}")
        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port),
            timeout=timeout,
        )
        return AsyncioNetworkStream(reader, writer)

    async def connect_tls(
        self,
        stream: NetworkStream,
        host: str,
        port: int,
        timeout: Optional[float] = None,
        alpn_protocols: Optional[List[str]] = None,
    ) -> AsyncioNetworkStream:
        if not isinstance(stream, AsyncioNetworkStream):
            raise TypeError("AsyncioNetworkBackend can only upgrade its own streams")

        context = self._ssl_context or create_ssl_context(
            alpn_protocols=alpn_protocols or ["http/1.1"]
        )
        logger.debug(f"Starting TLS with {host}:{port}")
        return await asyncio.wait_for(
            stream.start_tls(context, server_hostname=host),
            timeout=timeout,
        )
