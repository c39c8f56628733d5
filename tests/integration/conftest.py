import json
from collections import Counter

import httpx
import pytest

BASE_URL = "https://ws.test"
RATE_HEADERS = {"X-RateLimit-Limit": "60", "X-RateLimit-Remaining": "40"}


class FakeApiVideo:
    """In-memory stand-in for the api.video endpoints used by a run.

    `captions` maps video ids to their caption languages; None means the
    captions endpoint answers 404 for that video. `raw_captions` overrides
    the captions body for a video with an arbitrary JSON value.
    """

    def __init__(self, captions, auth_status=200, throttle_once=(), raw_captions=None):
        self.captions = {video: (list(langs) if langs is not None else None) for video, langs in captions.items()}
        self.auth_status = auth_status
        self.throttle_once = set(throttle_once)
        self.raw_captions = raw_captions or {}
        self.hits = Counter()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.hits[(request.method, path)] += 1

        if path == "/auth/api-key":
            if self.auth_status != 200:
                return httpx.Response(self.auth_status, json={"title": "Unauthorized"})
            assert json.loads(request.content) == {"apiKey": "secret"}
            return httpx.Response(200, json={"access_token": "tok"}, headers=RATE_HEADERS)

        assert request.headers["authorization"] == "Bearer tok"
        parts = path.strip("/").split("/")

        if parts == ["videos"]:
            videos = [{"videoId": v, "title": f"Video {v}"} for v in self.captions]
            return httpx.Response(200, json={
                "data": videos,
                "pagination": {"currentPage": 1, "pagesTotal": 1},
            }, headers=RATE_HEADERS)

        video = parts[1]
        if request.method == "GET":
            if video in self.throttle_once:
                self.throttle_once.discard(video)
                return httpx.Response(429, headers={"X-RateLimit-Remaining": "0", "X-RateLimit-Retry-After": "0"})
            if video in self.raw_captions:
                return httpx.Response(200, json=self.raw_captions[video], headers=RATE_HEADERS)
            if self.captions.get(video) is None:
                return httpx.Response(404, json={"title": "Not found"})
            return httpx.Response(
                200, json={"data": [{"srclang": lang} for lang in self.captions[video]]}, headers=RATE_HEADERS
            )

        self.captions[video].remove(parts[3])
        return httpx.Response(204, headers=RATE_HEADERS)


@pytest.fixture
def fake_api_video():
    """The FakeApiVideo class, for building a server per test."""
    return FakeApiVideo
