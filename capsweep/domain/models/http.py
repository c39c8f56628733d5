"""Transport-neutral HTTP request/response value objects.

The core never touches httpx directly; transports translate to and from
these types.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class HttpRequest:
    """A single HTTP call the executor can (re)issue."""
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    json_body: Optional[Any] = None

    def describe(self) -> str:
        return f"{self.method} {self.url}"


@dataclass
class HttpResponse:
    """Status code, header map and raw body of a completed HTTP call."""
    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    content: bytes = b""
    reason_phrase: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """Decodes the body as JSON. An empty body decodes to None."""
        if not self.content:
            return None
        return json.loads(self.content)
