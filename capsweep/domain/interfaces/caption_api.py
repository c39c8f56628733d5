"""Interface for the remote video/caption API.

The orchestrator only needs these four operations. Implementations own the
endpoint URLs, the bearer token and the interpretation of status codes.
"""

import abc
from typing import List

from capsweep.domain.models.common import AccessToken, ApiKey, ItemId, LanguageTag
from capsweep.domain.models.items import ChildItem, PageEnvelope


class CaptionApi(abc.ABC):
    """Abstract Base Class for the video/caption endpoints."""

    @abc.abstractmethod
    async def authenticate(self, api_key: ApiKey) -> AccessToken:
        """Exchanges the API key for a bearer token used by later calls.

        Raises:
            AuthenticationError: If the key is rejected.
        """
        pass

    @abc.abstractmethod
    async def fetch_video_page(self, page: int, page_size: int) -> PageEnvelope:
        """Fetches one page of videos (pages are 1-based).

        Raises:
            ApiStatusError: If the page cannot be read.
            RetriesExhaustedError: If retries ran out.
        """
        pass

    @abc.abstractmethod
    async def list_captions(self, video_id: ItemId) -> List[ChildItem]:
        """Lists a video's caption tracks. A video without captions yields []."""
        pass

    @abc.abstractmethod
    async def delete_caption(self, video_id: ItemId, language: LanguageTag) -> bool:
        """Deletes one caption track. Returns True on a 2xx answer.

        Raises:
            AuthenticationError: If the token is no longer accepted.
        """
        pass
