"""
Pytest configuration for http_dispatch tests.

This file contains shared fixtures and helpers for all tests in the project.
"""

import json
from typing import Any, List, Optional, Tuple

import pytest

from http_dispatch.client import BaseHTTPClient
from http_dispatch.http_primitives import Request, Response
from http_dispatch.network.mock import MockNetworkBackend


BASE_URL = "https://api.example.com"

TODOS = [{"id": 1, "title": "a", "completed": False}]


class StubClient(BaseHTTPClient):
    """Client that returns a canned response or raises a canned error."""

    def __init__(
        self,
        response: Optional[Response] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        self.response = response
        self.error = error
        self.requests: List[Request] = []
        self.closed = False

    async def send(self, request: Request) -> Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.response

    async def aclose(self) -> None:
        self.closed = True


def raw_response(
    status_code: int = 200,
    body: bytes = b"",
    headers: Optional[List[Tuple[str, str]]] = None,
    reason: str = "OK",
) -> bytes:
    """Serialize an HTTP/1.1 response the way a server would send it."""
    lines = [f"HTTP/1.1 {status_code} {reason}"]
    for name, value in headers or []:
        lines.append(f"{name}: {value}")
    if not any(name.lower() == "content-length" for name, _ in headers or []):
        lines.append(f"Content-Length: {len(body)}")
    return ("\r\n".join(lines) + "\r\n\r\n").encode("ascii") + body


@pytest.fixture
def mock_backend():
    """A fresh in-memory network backend."""
    return MockNetworkBackend()


@pytest.fixture
def stub_client():
    """Factory for StubClient instances."""
    def _create(
        status_code: int = 200,
        body: Any = b"",
        error: Optional[BaseException] = None,
    ) -> StubClient:
        if not isinstance(body, bytes):
            body = json.dumps(body).encode()
        return StubClient(Response.create(status_code, content=body), error)
    return _create


@pytest.fixture
def todos_body():
    """JSON body with one todo."""
    return json.dumps(TODOS).encode()


@pytest.fixture
def sample_headers():
    """Sample caller headers for testing."""
    return {
        "Authorization": "Bearer token123",
        "X-Request-Id": "abc",
    }


@pytest.fixture
def base_url():
    return BASE_URL


@pytest.fixture
def response_bytes():
    """Factory building raw HTTP/1.1 responses."""
    return raw_response
