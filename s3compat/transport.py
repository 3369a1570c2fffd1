"""HTTP transport used by the client.

The client only needs "send a request, get status/headers/body back".
That capability is the Transport interface; HttpxTransport implements it
with an httpx.Client. Transports never retry: network failures surface as
TransportFailure, and HTTP error statuses are returned as ordinary
responses for the client to interpret.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

import httpx

from s3compat.errors import TransportFailure

logger = logging.getLogger(__name__)

# Per-operation timeout hints, in seconds
DEFAULT_TIMEOUTS: Mapping[str, float] = MappingProxyType({
    "head_object": 15.0,
    "delete_object": 15.0,
    "get_object": 30.0,
    "list_objects": 30.0,
    "list_buckets": 30.0,
    "copy_object": 30.0,
    "bucket": 30.0,
    "put_object": 60.0,
    "batch_delete": 60.0,
    "upload_object": 120.0,
    "default": 30.0,
})


@dataclass(frozen=True)
class RequestOptions:
    """Per-call request settings.

    Attributes:
        timeout: Seconds before the transport gives up; None uses the
            default hint for the operation
        headers: Extra headers sent with the request
    """

    timeout: Optional[float] = None
    headers: Mapping[str, str] = field(default_factory=dict)


def timeout_for(operation: str, options: Optional[RequestOptions] = None) -> float:
    if options is not None and options.timeout is not None:
        return options.timeout
    return DEFAULT_TIMEOUTS.get(operation, DEFAULT_TIMEOUTS["default"])


@dataclass
class HttpResponse:
    """A completed HTTP exchange. Header names are lower-case."""

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    reason: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Transport(ABC):
    """Sends a single HTTP request."""

    @abstractmethod
    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: bytes = b"",
        timeout: float = 30.0,
    ) -> HttpResponse:
        """Send a request.

        Raises:
            TransportFailure: If no HTTP response was received
        """
        pass

    def close(self) -> None:
        pass


class HttpxTransport(Transport):
    """Transport backed by an httpx.Client.

    Args:
        client: Client to use; one is created (and owned) when omitted
        verify: TLS verification setting for a created client
    """

    def __init__(self, client: Optional[httpx.Client] = None, verify: bool = True):
        self._owns_client = client is None
        self._client = client or httpx.Client(verify=verify)

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: bytes = b"",
        timeout: float = 30.0,
    ) -> HttpResponse:
        logger.debug("%s %s (timeout %.0fs)", method, url.split("?", 1)[0], timeout)
        try:
            response = self._client.request(
                method,
                url,
                headers=dict(headers),
                content=body or None,
                timeout=timeout,
            )
        except httpx.TimeoutException as e:
            raise TransportFailure(
                f"{method} request timed out after {timeout:.0f}s: {e}",
                code="timeout",
            ) from e
        except httpx.HTTPError as e:
            raise TransportFailure(f"{method} request failed: {e}") from e

        logger.debug("%s %s -> %d", method, url.split("?", 1)[0], response.status_code)
        return HttpResponse(
            status=response.status_code,
            headers={name.lower(): value for name, value in response.headers.items()},
            body=response.content,
            reason=response.reason_phrase,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
