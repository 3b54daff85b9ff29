"""
Request dispatching for http_dispatch.

The Dispatcher sends a transport Request through an injected client,
classifies the response status, decodes successful bodies and maps every
failure onto the NetworkError taxonomy.
"""

import asyncio
import logging
from typing import Any, Optional, Type, TypeVar

import h11

from .client import BaseHTTPClient, HTTPClient
from .decoders import Decoder, JSONDecoder
from .http_primitives import Request, Response, URLComponents
from .request import RequestDescriptor
from .exceptions import (
    BadRequest,
    DecodingError,
    Error4xx,
    Error5xx,
    Forbidden,
    InvalidRequest,
    NetworkError,
    NotFound,
    ServerError,
    TransportError,
    TransportFailed,
    Unauthorized,
    UnknownError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSPORT_ERRORS = (TransportError, OSError, asyncio.TimeoutError, h11.ProtocolError)
DECODING_ERRORS = (ValueError, TypeError, KeyError)


def http_error(status_code: int) -> Optional[NetworkError]:
    """
    Map a status code to its NetworkError, or None for 2xx.

    >>> http_error(404)
    NotFound()
    >>> http_error(418)
    Error4xx(418)
    """
    if 200 <= status_code <= 299:
        return None
    if status_code == 400:
        return BadRequest()
    if status_code == 401:
        return Unauthorized()
    if status_code == 403:
        return Forbidden()
    if status_code == 404:
        return NotFound()
    if status_code == 402 or 405 <= status_code <= 499:
        return Error4xx(status_code)
    if status_code == 500:
        return ServerError()
    if 501 <= status_code <= 599:
        return Error5xx(status_code)
    return UnknownError()


def _task_is_cancelling() -> bool:
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0


class Dispatcher:
    """
    Sends transport requests and classifies their outcome.

    The dispatcher owns no per-call state; concurrent ``dispatch`` calls on
    one instance are independent.

    Args:
        client: The HTTP client to send through. A new ``HTTPClient`` is
            created when omitted; it is never shared between dispatchers.
        decoder: Decoder used when a call does not supply one.
    """

    def __init__(
        self,
        client: Optional[BaseHTTPClient] = None,
        decoder: Optional[Decoder] = None,
    ) -> None:
        self._client = client or HTTPClient()
        self._decoder = decoder or JSONDecoder()

    @property
    def client(self) -> BaseHTTPClient:
        return self._client

    async def dispatch(
        self,
        request: Optional[Request],
        response_type: Type[T] = Any,  # type: ignore[assignment]
        decoder: Optional[Decoder] = None,
    ) -> T:
        """
        Send ``request`` and decode the response body as ``response_type``.

        Args:
            request: Transport request; None (a failed render) is rejected
                with InvalidRequest before any I/O
            response_type: Expected shape of the decoded body
            decoder: Decoder for this call, defaults to the dispatcher's

        Returns:
            The decoded body

        Raises:
            NetworkError: One of the taxonomy variants
        """
        if request is None:
            raise InvalidRequest()
        try:
            components = URLComponents.from_url(request.url)
        except ValueError as e:
            raise InvalidRequest() from e
        if components.scheme not in ("http", "https"):
            raise InvalidRequest()

        try:
            response = await self._client.send(request)
        except NetworkError:
            raise
        except asyncio.CancelledError as e:
            if _task_is_cancelling():
                raise
            logger.warning(f"{request.method} {request.url} was cancelled by the client")
            raise TransportFailed(e) from e
        except TRANSPORT_ERRORS as e:
            logger.warning(f"{request.method} {request.url} failed: {e!r}")
            raise TransportFailed(e) from e
        except Exception as e:
            logger.warning(f"{request.method} {request.url} raised {e!r}")
            raise UnknownError() from e

        logger.debug(f"{request.method} {request.url} -> {response.status_code}")
        return self._handle_response(request, response, response_type, decoder or self._decoder)

    def _handle_response(
        self,
        request: Request,
        response: Response,
        response_type: Type[T],
        decoder: Decoder,
    ) -> T:
        error = http_error(response.status_code)
        if error is not None:
            logger.warning(f"{request.method} {request.url} returned {response.status_code}")
            raise error

        try:
            return decoder.decode(response_type, response.content)
        except NetworkError:
            raise
        except DECODING_ERRORS as e:
            logger.warning(f"Cannot decode {request.method} {request.url} body: {e}")
            raise DecodingError() from e
        except Exception as e:
            raise UnknownError() from e

    async def request(self, descriptor: RequestDescriptor[T], base_url: str) -> T:
        """
        Render ``descriptor`` against ``base_url`` and dispatch it.

        Raises:
            InvalidRequest: If the descriptor cannot be rendered
            NetworkError: Any other taxonomy variant from ``dispatch``
        """
        return await self.dispatch(
            descriptor.render(base_url),
            response_type=descriptor.response_type,
            decoder=descriptor.decoder,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "Dispatcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
