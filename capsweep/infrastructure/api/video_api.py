"""api.video implementation of the CaptionApi port.

Builds endpoint URLs, attaches the bearer token, and turns status codes into
results or domain errors. All calls go through the retrying executor.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar
from urllib.parse import quote

from capsweep.domain.errors import ApiStatusError, AuthenticationError
from capsweep.domain.interfaces.caption_api import CaptionApi
from capsweep.domain.models.common import AccessToken, ApiKey, ItemId, LanguageTag
from capsweep.domain.models.http import HttpRequest, HttpResponse
from capsweep.domain.models.items import ChildItem, PageEnvelope, ParentItem
from capsweep.infrastructure.resilience.api_retry import RetryingExecutor

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_BASE_URL = "https://ws.api.video"
NOT_FOUND = 404
AUTH_REJECTED = (401, 403)


def _describe_status(response: HttpResponse) -> str:
    return f"{response.status_code} {response.reason_phrase}".strip()


def _decode(response: HttpResponse, request: HttpRequest) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise ApiStatusError(f"Malformed JSON from {request.describe()} ({e})", response.status_code, request.url) from e


def _parse(parser: Callable[[Any], T], response: HttpResponse, request: HttpRequest) -> T:
    """Decodes the body and hands it to `parser`. Shape errors become ApiStatusError."""
    payload = _decode(response, request)
    try:
        return parser(payload)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ApiStatusError(
            f"Unexpected payload from {request.describe()} ({type(e).__name__}: {e})", response.status_code, request.url
        ) from e


def parse_video_page(payload: Dict[str, Any], requested_page: int) -> PageEnvelope:
    """Parses a `/videos` listing into a PageEnvelope."""
    items = [
        ParentItem(item_id=ItemId(str(video["videoId"])), label=str(video.get("title") or ""))
        for video in payload.get("data") or []
    ]
    pagination = payload.get("pagination") or {}
    return PageEnvelope(
        items=items,
        current_page=int(pagination.get("currentPage", requested_page)),
        total_pages=int(pagination.get("pagesTotal", 1)),
    )


def parse_captions(video_id: ItemId, payload: Optional[Dict[str, Any]]) -> List[ChildItem]:
    """Parses a `/captions` listing. Tracks without a language are skipped."""
    children: List[ChildItem] = []
    for caption in (payload or {}).get("data") or []:
        language = caption.get("srclang") or caption.get("language")
        if not language:
            logger.warning(f"Skipping caption without a language on video {video_id}: {caption}")
            continue
        children.append(ChildItem(parent_id=video_id, language=LanguageTag(str(language))))
    return children


class ApiVideoClient(CaptionApi):
    """Calls the api.video REST endpoints for videos and captions."""

    def __init__(self, executor: RetryingExecutor, base_url: str = DEFAULT_BASE_URL):
        self.executor = executor
        self.base_url = base_url.rstrip("/")
        self.access_token: Optional[AccessToken] = None

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}

    async def authenticate(self, api_key: ApiKey) -> AccessToken:
        logger.info("Authenticating with api.video...")
        request = HttpRequest(
            method="POST",
            url=f"{self.base_url}/auth/api-key",
            headers={"accept": "application/json", "content-type": "application/json"},
            json_body={"apiKey": api_key},
        )
        response = await self.executor.execute(request)
        if not response.ok:
            raise AuthenticationError(
                f"Authentication failed ({_describe_status(response)})", response.status_code, request.url
            )

        token = _parse(lambda payload: (payload or {}).get("access_token"), response, request)
        if not token:
            raise AuthenticationError("Authentication response carried no access_token", response.status_code, request.url)
        self.access_token = AccessToken(token)
        logger.info("Authentication successful.")
        return self.access_token

    async def fetch_video_page(self, page: int, page_size: int) -> PageEnvelope:
        request = HttpRequest(
            method="GET",
            url=f"{self.base_url}/videos?currentPage={page}&pageSize={page_size}",
            headers=self._auth_headers(),
        )
        response = await self.executor.execute(request)
        if response.status_code in AUTH_REJECTED:
            raise AuthenticationError("Token rejected while fetching videos", response.status_code, request.url)
        if not response.ok:
            raise ApiStatusError(
                f"Failed to fetch videos page {page} ({_describe_status(response)})", response.status_code, request.url
            )
        return _parse(lambda payload: parse_video_page(payload or {}, page), response, request)

    async def list_captions(self, video_id: ItemId) -> List[ChildItem]:
        request = HttpRequest(
            method="GET",
            url=f"{self.base_url}/videos/{quote(video_id, safe='')}/captions",
            headers=self._auth_headers(),
        )
        response = await self.executor.execute(request)
        if response.status_code == NOT_FOUND:
            return []
        if response.status_code in AUTH_REJECTED:
            raise AuthenticationError(f"Token rejected while listing captions for {video_id}", response.status_code, request.url)
        if not response.ok:
            raise ApiStatusError(
                f"Failed to fetch captions for video {video_id} ({_describe_status(response)})",
                response.status_code,
                request.url,
            )
        return _parse(lambda payload: parse_captions(video_id, payload), response, request)

    async def delete_caption(self, video_id: ItemId, language: LanguageTag) -> bool:
        request = HttpRequest(
            method="DELETE",
            url=f"{self.base_url}/videos/{quote(video_id, safe='')}/captions/{quote(language, safe='')}",
            headers=self._auth_headers(),
        )
        response = await self.executor.execute(request)
        if response.status_code in AUTH_REJECTED:
            raise AuthenticationError(f"Token rejected while deleting caption {language} of {video_id}", response.status_code, request.url)
        if not response.ok:
            logger.warning(f"Failed to delete caption ({language}) for video {video_id}: {_describe_status(response)}")
        return response.ok
