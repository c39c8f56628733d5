import json
from typing import Any, Dict, List, Optional

import pytest
from typer.testing import CliRunner

from capsweep.domain.models.http import HttpResponse
from capsweep.infrastructure.config import settings
from capsweep.infrastructure.resilience.rate_limit_tracker import RateLimitTracker
from capsweep.infrastructure.resilience.throttle import AdaptiveThrottle


class RecordingSleep:
    """Awaitable stand-in for asyncio.sleep that records every delay."""

    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class RecordingReporter:
    """ProgressReporter double that keeps every emitted event."""

    def __init__(self):
        self.events: List[Any] = []

    def emit(self, event) -> None:
        self.events.append(event)

    def of_type(self, event_type) -> List[Any]:
        return [e for e in self.events if isinstance(e, event_type)]


def _make_response(
    status_code: int = 200,
    body: Optional[Any] = None,
    remaining: Optional[int] = None,
    limit: Optional[int] = None,
    retry_after: Optional[int] = None,
) -> HttpResponse:
    headers: Dict[str, str] = {}
    if limit is not None:
        headers["X-RateLimit-Limit"] = str(limit)
    if remaining is not None:
        headers["X-RateLimit-Remaining"] = str(remaining)
    if retry_after is not None:
        headers["X-RateLimit-Retry-After"] = str(retry_after)
    content = json.dumps(body).encode() if body is not None else b""
    return HttpResponse(status_code=status_code, headers=headers, content=content)


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture
def make_response():
    """Builds domain HttpResponses with optional rate-limit headers."""
    return _make_response


@pytest.fixture
def fake_sleep():
    return RecordingSleep()


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def tracker():
    return RateLimitTracker(clock=lambda: 1000.0)


@pytest.fixture
def throttle(tracker, fake_sleep, reporter):
    return AdaptiveThrottle(tracker, low_water_mark=5, sleep=fake_sleep, reporter=reporter)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Keeps tests away from the developer's real environment and config."""
    for name in ("API_KEY", "BASE_URL", "RUN_MAX_RETRIES", "RUN_PROFILE", "RUN_PAGE_SIZE",
                 "HTTP_TIMEOUT_SECONDS", "LOGGING_LEVEL", "LOGGING_FILE", "LOGGING_FORMAT"):
        monkeypatch.delenv(name, raising=False)
    settings.reset_configuration()
    settings.clear_test_config()
    yield
    settings.reset_configuration()
    settings.clear_test_config()
