"""Interface for the HTTP transport.

Defines the contract the retrying executor uses to put a request on the
wire, allowing different client libraries (or test doubles) underneath.
"""

import abc

from capsweep.domain.models.http import HttpRequest, HttpResponse


class HttpTransport(abc.ABC):
    """Abstract Base Class for sending a single HTTP request."""

    @abc.abstractmethod
    async def send(self, request: HttpRequest) -> HttpResponse:
        """Sends the request and returns whatever the server answered.

        Any status code, including 4xx/5xx, is a response, not an error.

        Args:
            request: The request to issue.

        Returns:
            The server's response.

        Raises:
            TransportError: If no response was received (connection reset,
                DNS failure, timeout, ...).
        """
        pass

    async def aclose(self) -> None:
        """Releases pooled connections. Optional for implementations."""
        pass
