"""
Tests for the HTTP/1.1 connection implementation.

The connection is driven over a MockNetworkStream preloaded with raw
server bytes, so the h11 framing is exercised end to end.
"""

import asyncio

import h11
import pytest

from http_dispatch.http11 import HTTP11Connection, ConnectionState
from http_dispatch.http_primitives import Request
from http_dispatch.network.mock import MockNetworkStream
from http_dispatch.exceptions import ConnectionError, ProtocolError


class HangingStream(MockNetworkStream):
    """Stream whose reads never complete."""

    async def read(self, max_bytes=None) -> bytes:
        await asyncio.sleep(60)
        return b""


def get_request(**headers) -> Request:
    return Request.create(
        "GET",
        "http://example.com/todos?id=1",
        headers={"Host": "example.com", **headers},
    )


class TestHTTP11Connection:
    """Test HTTP/1.1 connection functionality."""

    @pytest.fixture
    def mock_stream(self):
        return MockNetworkStream()

    @pytest.fixture
    def connection(self, mock_stream):
        return HTTP11Connection(mock_stream)

    def test_connection_initialization(self, connection) -> None:
        assert connection._state == ConnectionState.NEW
        assert not connection.is_closed
        assert connection.metrics["bytes_sent"] == 0

    @pytest.mark.asyncio
    async def test_simple_get_request_cycle(self, connection, mock_stream) -> None:
        response_data = (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Length: 11\r\n"
            b"Server: test\r\n"
            b"\r\n"
            b"Hello World"
        )
        mock_stream.add_data(response_data)

        response = await connection.handle_request(get_request())

        assert response.status_code == 200
        assert response.content == b"Hello World"
        assert response.get_header("Server") == b"test"
        assert response.extensions["http_version"] == b"1.1"

        written_data = mock_stream.written_data
        assert written_data.startswith(b"GET /todos?id=1 HTTP/1.1\r\n")
        assert b"Host: example.com" in written_data

        assert connection.is_closed
        assert mock_stream.is_closed
        assert connection.metrics["bytes_received"] == len(response_data)
        assert connection.metrics["bytes_sent"] == len(written_data)

    @pytest.mark.asyncio
    async def test_post_request_with_body(self, connection, mock_stream) -> None:
        mock_stream.add_data(b"HTTP/1.1 201 Created\r\nContent-Length: 0\r\n\r\n")
        request = Request.create(
            "POST",
            "http://example.com/todos",
            headers={"Host": "example.com", "Content-Length": "13"},
            body=b'{"title":"a"}',
        )

        response = await connection.handle_request(request)

        assert response.status_code == 201
        assert response.content == b""
        assert mock_stream.written_data.endswith(b'\r\n\r\n{"title":"a"}')

    @pytest.mark.asyncio
    async def test_chunked_response(self, connection, mock_stream) -> None:
        mock_stream.add_data(
            b"HTTP/1.1 200 OK\r\n"
            b"Transfer-Encoding: chunked\r\n"
            b"\r\n"
            b"5\r\nHello\r\n"
            b"6\r\n World\r\n"
            b"0\r\n\r\n"
        )
        response = await connection.handle_request(get_request())
        assert response.content == b"Hello World"

    @pytest.mark.asyncio
    async def test_close_delimited_response(self, connection, mock_stream) -> None:
        mock_stream.add_data(b"HTTP/1.1 200 OK\r\nConnection: close\r\n\r\n[1, 2, 3]")
        response = await connection.handle_request(get_request())
        assert response.content == b"[1, 2, 3]"

    @pytest.mark.asyncio
    async def test_informational_response_skipped(self, connection, mock_stream) -> None:
        mock_stream.add_data(
            b"HTTP/1.1 100 Continue\r\n\r\n"
            b"HTTP/1.1 404 Not Found\r\nContent-Length: 0\r\n\r\n"
        )
        response = await connection.handle_request(get_request())
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_truncated_body(self, connection, mock_stream) -> None:
        mock_stream.add_data(b"HTTP/1.1 200 OK\r\nContent-Length: 10\r\n\r\nHello")
        with pytest.raises(ProtocolError):
            await connection.handle_request(get_request())
        assert connection.is_closed

    @pytest.mark.asyncio
    async def test_no_response(self, connection) -> None:
        with pytest.raises(ProtocolError):
            await connection.handle_request(get_request())

    @pytest.mark.asyncio
    async def test_malformed_status_line(self, connection, mock_stream) -> None:
        mock_stream.add_data(b"NOT HTTP AT ALL\r\n\r\n")
        with pytest.raises(ProtocolError):
            await connection.handle_request(get_request())

    @pytest.mark.asyncio
    async def test_missing_host_header(self, connection) -> None:
        request = Request.create("GET", "http://example.com/")
        with pytest.raises(h11.LocalProtocolError):
            await connection.handle_request(request)
        assert connection.is_closed

    @pytest.mark.asyncio
    async def test_connection_is_single_use(self, connection, mock_stream) -> None:
        mock_stream.add_data(b"HTTP/1.1 204 No Content\r\n\r\n")
        await connection.handle_request(get_request())

        with pytest.raises(ConnectionError):
            await connection.handle_request(get_request())

    @pytest.mark.asyncio
    async def test_read_timeout(self) -> None:
        stream = HangingStream()
        connection = HTTP11Connection(stream, read_timeout=0.05)

        with pytest.raises(asyncio.TimeoutError):
            await connection.handle_request(get_request())
        assert stream.is_closed
        assert connection.metrics["state"] == "closed"
