"""
Tests for network interfaces and their implementations.
"""

import asyncio
import ssl

import pytest

from http_dispatch.network import (
    AsyncioNetworkBackend,
    AsyncioNetworkStream,
    MockNetworkBackend,
    MockNetworkStream,
    NetworkBackend,
    NetworkStream,
    create_ssl_context,
    format_host_header,
)


class TestMockNetworkStream:
    """Test cases for MockNetworkStream."""

    @pytest.mark.asyncio
    async def test_read_write_basic(self) -> None:
        stream = MockNetworkStream(b"hello world")

        await stream.write(b"ping")
        assert stream.written_data == b"ping"

        assert await stream.read(5) == b"hello"
        assert await stream.read() == b" world"
        assert await stream.read() == b""

    @pytest.mark.asyncio
    async def test_add_data(self) -> None:
        stream = MockNetworkStream()
        stream.add_data(b"abc")
        assert await stream.read(10) == b"abc"

    @pytest.mark.asyncio
    async def test_closed_stream(self) -> None:
        stream = MockNetworkStream(b"data")
        await stream.aclose()

        assert stream.is_closed
        with pytest.raises(RuntimeError, match="Stream is closed"):
            await stream.read()
        with pytest.raises(RuntimeError, match="Stream is closed"):
            await stream.write(b"x")

    def test_interface(self) -> None:
        assert isinstance(MockNetworkStream(), NetworkStream)


class TestMockNetworkBackend:
    """Test cases for MockNetworkBackend."""

    @pytest.mark.asyncio
    async def test_connect_serves_queued_responses(self, mock_backend) -> None:
        mock_backend.queue_response("example.com", 80, b"first")
        mock_backend.queue_response("example.com", 80, b"second")

        first = await mock_backend.connect_tcp("example.com", 80)
        second = await mock_backend.connect_tcp("example.com", 80)
        other = await mock_backend.connect_tcp("example.com", 8080)

        assert await first.read() == b"first"
        assert await second.read() == b"second"
        assert await other.read() == b""
        assert first is not second
        assert first.get_extra_info("peername") == ("example.com", 80)
        assert mock_backend.streams == [first, second, other]
        assert mock_backend.last_stream is other

    @pytest.mark.asyncio
    async def test_fail_next_connect(self, mock_backend) -> None:
        mock_backend.fail_next_connect("example.com", 80, ConnectionRefusedError("refused"))

        with pytest.raises(ConnectionRefusedError):
            await mock_backend.connect_tcp("example.com", 80)
        assert await mock_backend.connect_tcp("example.com", 80) is not None

    @pytest.mark.asyncio
    async def test_connect_tls(self, mock_backend) -> None:
        stream = await mock_backend.connect_tcp("example.com", 443)
        tls_stream = await mock_backend.connect_tls(stream, "example.com", 443, alpn_protocols=["http/1.1"])

        assert tls_stream.get_extra_info("ssl_object") is True
        assert tls_stream.get_extra_info("selected_alpn_protocol") == "http/1.1"
        assert mock_backend.tls_hosts == ["example.com"]

    @pytest.mark.asyncio
    async def test_reset(self, mock_backend) -> None:
        mock_backend.queue_response("example.com", 80, b"data")
        await mock_backend.connect_tcp("example.com", 80)
        mock_backend.reset()

        assert mock_backend.streams == []
        assert mock_backend.last_stream is None

    def test_interface(self) -> None:
        assert isinstance(MockNetworkBackend(), NetworkBackend)


class TestAsyncioNetworkBackend:
    """AsyncioNetworkBackend against a local echo server."""

    @pytest.mark.asyncio
    async def test_tcp_round_trip(self) -> None:
        async def echo(reader, writer):
            data = await reader.read(100)
            writer.write(data.upper())
            await writer.drain()
            writer.close()

        server = await asyncio.start_server(echo, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        async with server:
            backend = AsyncioNetworkBackend()
            stream = await backend.connect_tcp("127.0.0.1", port, timeout=2.0)
            assert isinstance(stream, AsyncioNetworkStream)

            await stream.write(b"hello")
            assert await stream.read(100) == b"HELLO"
            assert stream.get_extra_info("peername")[1] == port
            assert stream.get_extra_info("ssl_object") is False

            await stream.aclose()
            assert stream.is_closed
            with pytest.raises(RuntimeError):
                await stream.read()

    @pytest.mark.asyncio
    async def test_connection_refused(self) -> None:
        server = await asyncio.start_server(lambda r, w: None, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        server.close()
        await server.wait_closed()

        with pytest.raises(OSError):
            await AsyncioNetworkBackend().connect_tcp("127.0.0.1", port, timeout=2.0)

    @pytest.mark.asyncio
    async def test_tls_requires_own_stream(self) -> None:
        with pytest.raises(TypeError):
            await AsyncioNetworkBackend().connect_tls(MockNetworkStream(), "example.com", 443)


class TestUtils:
    """Network utility helpers."""

    @pytest.mark.parametrize(
        "host,port,scheme,expected",
        [
            ("example.com", 80, "http", "example.com"),
            ("example.com", 443, "https", "example.com"),
            ("example.com", 8080, "http", "example.com:8080"),
            ("example.com", 80, "https", "example.com:80"),
            ("::1", 8443, "https", "[::1]:8443"),
        ],
    )
    def test_format_host_header(self, host, port, scheme, expected) -> None:
        assert format_host_header(host, port, scheme) == expected

    def test_create_ssl_context(self) -> None:
        context = create_ssl_context(alpn_protocols=["http/1.1"])
        assert context.verify_mode == ssl.CERT_REQUIRED
        assert context.check_hostname
        assert context.minimum_version == ssl.TLSVersion.TLSv1_2

    def test_create_ssl_context_without_verification(self) -> None:
        context = create_ssl_context(verify_mode=ssl.CERT_NONE, check_hostname=False)
        assert context.verify_mode == ssl.CERT_NONE
