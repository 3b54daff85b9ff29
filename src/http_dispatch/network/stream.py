"""
Network stream interface for http_dispatch.

This module defines the NetworkStream interface that every backend's
streams implement, so the HTTP/1.1 layer never touches sockets directly.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class NetworkStream(ABC):
    """
    Interface for network streams with async I/O operations.

    Implementations provide reading, writing and closing of a single
    connected byte stream.
    """

    @abstractmethod
    async def read(self, max_bytes: Optional[int] = None) -> bytes:
        """
        Read data from the stream.

        Args:
            max_bytes: Maximum number of bytes to read.

        Returns:
            The data read from the stream; ``b""`` once the peer has closed.

        Raises:
            RuntimeError: If the stream is closed.
            OSError: If a network error occurs.
        """

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """
        Write data to the stream.

        Raises:
            RuntimeError: If the stream is closed.
            OSError: If a network error occurs.
        """

    @abstractmethod
    async def aclose(self) -> None:
        """Close the stream and cleanup resources."""

    @abstractmethod
    def get_extra_info(self, name: str) -> Optional[Any]:
        """
        Get extra information about the stream.

        Common names: "peername", "sockname", "ssl_object".
        """

    @property
    @abstractmethod
    def is_closed(self) -> bool:
        """True once the stream has been closed."""
