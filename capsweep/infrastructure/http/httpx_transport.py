"""httpx implementation of the HttpTransport port.

Standardizes timeouts and default headers in one place and translates
httpx failures into domain errors, so the executor only sees
`TransportError` (retryable) or `ConfigurationError` (not retryable).
"""

import logging
from typing import Dict, Optional

import httpx

from capsweep import __version__
from capsweep.domain.errors import ConfigurationError, TransportError
from capsweep.domain.interfaces.http_transport import HttpTransport
from capsweep.domain.models.http import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
USER_AGENT = f"capsweep/{__version__}"


def build_async_client(
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    *,
    extra_headers: Optional[Dict[str, str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Creates an `httpx.AsyncClient` with the application's defaults.

    Args:
        timeout_seconds: Per-request timeout.
        extra_headers: Headers added to every request.
        transport: Optional low-level transport (e.g. `httpx.MockTransport`).
    """
    headers: Dict[str, str] = {
        "User-Agent": USER_AGENT,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout_seconds),
        headers=headers,
        transport=transport,
    )


class HttpxTransport(HttpTransport):
    """Sends domain `HttpRequest`s through an `httpx.AsyncClient`."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.client = client or build_async_client()

    async def send(self, request: HttpRequest) -> HttpResponse:
        try:
            response = await self.client.request(
                request.method,
                request.url,
                headers=request.headers,
                json=request.json_body,
            )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise ConfigurationError(f"Invalid request URL '{request.url}': {e}") from e
        except httpx.TransportError as e:
            logger.debug(f"Transport error for {request.describe()}: {type(e).__name__}: {e}")
            raise TransportError(f"{type(e).__name__}: {e}", original_exception=e) from e

        return HttpResponse(
            status_code=response.status_code,
            headers=response.headers,
            content=response.content,
            reason_phrase=response.reason_phrase,
        )

    async def aclose(self) -> None:
        await self.client.aclose()
