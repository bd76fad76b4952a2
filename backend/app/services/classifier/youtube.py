"""YouTube video disambiguation.

YouTube hosts both music and everything else. When an API key is configured,
the Videos API tells them apart by category and topic; otherwise YouTube URLs
stay ``video``.
"""

import asyncio
import logging
from typing import Any, Optional
from urllib.parse import SplitResult, parse_qs

import httpx

from app.models.bookmark import ContentType
from app.services.classifier.constants import (
    YOUTUBE_API_PARTS,
    YOUTUBE_ID_PATH_PREFIXES,
    YOUTUBE_MAIN_HOST_SUFFIX,
    YOUTUBE_MUSIC_CATEGORY_ID,
    YOUTUBE_MUSIC_TOPIC_HINTS,
    YOUTUBE_SHORT_HOST,
    YOUTUBE_VIDEO_ID_RE,
)
from app.services.classifier.hostname import normalize_hostname

logger = logging.getLogger(__name__)


def is_valid_youtube_video_id(value: Optional[str]) -> bool:
    return bool(value) and YOUTUBE_VIDEO_ID_RE.match(value) is not None


def extract_youtube_video_id(parsed_url: SplitResult) -> Optional[str]:
    """Pull the 11-character video ID out of the common YouTube URL shapes.

    Supported:
        - ``youtu.be/<id>``
        - ``youtube.com/watch?v=<id>``
        - ``youtube.com/{embed,shorts,live,v}/<id>``
    """
    hostname = normalize_hostname(parsed_url.hostname or "")
    path_parts = [p for p in parsed_url.path.split("/") if p]

    if hostname == YOUTUBE_SHORT_HOST:
        candidate = path_parts[0] if path_parts else ""
        return candidate if is_valid_youtube_video_id(candidate) else None

    if hostname != YOUTUBE_MAIN_HOST_SUFFIX and not hostname.endswith(
        f".{YOUTUBE_MAIN_HOST_SUFFIX}"
    ):
        return None

    from_query = parse_qs(parsed_url.query).get("v", [None])[0]
    if is_valid_youtube_video_id(from_query):
        return from_query

    if len(path_parts) >= 2 and path_parts[0] in YOUTUBE_ID_PATH_PREFIXES:
        if is_valid_youtube_video_id(path_parts[1]):
            return path_parts[1]

    return None


def _is_music_topic(topic_categories: list[Any]) -> bool:
    hints = [h.lower() for h in YOUTUBE_MUSIC_TOPIC_HINTS]
    return any(
        isinstance(topic, str) and any(h in topic.lower() for h in hints)
        for topic in topic_categories
    )


def content_type_from_video_payload(payload: Any) -> Optional[ContentType]:
    """Map a Videos API response body to a content type.

    Returns ``None`` when the payload has no usable video item.
    """
    if not isinstance(payload, dict):
        return None
    items = payload.get("items")
    if not isinstance(items, list) or not items or not isinstance(items[0], dict):
        return None

    video = items[0]
    snippet = video.get("snippet") or {}
    if isinstance(snippet, dict) and snippet.get("categoryId") == YOUTUBE_MUSIC_CATEGORY_ID:
        return ContentType.MUSIC

    topic_details = video.get("topicDetails") or {}
    topics = topic_details.get("topicCategories") if isinstance(topic_details, dict) else None
    if isinstance(topics, list) and _is_music_topic(topics):
        return ContentType.MUSIC

    return ContentType.VIDEO


class YouTubeCategoryResolver:
    """Looks up a video's category through the YouTube Data API.

    ``resolve`` never raises: missing key, timeouts, HTTP errors and odd
    payloads all come back as ``None`` ("no refinement").
    """

    def __init__(
        self,
        api_key: Optional[str],
        *,
        base_url: str,
        timeout: float = 3.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_key = api_key or None
        self.base_url = base_url
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def enabled(self) -> bool:
        return self.api_key is not None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def resolve(self, video_id: str) -> Optional[ContentType]:
        if not self.enabled:
            return None

        params = {"part": YOUTUBE_API_PARTS, "id": video_id, "key": self.api_key}
        try:
            response = await asyncio.wait_for(
                self._get_client().get(self.base_url, params=params),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"YouTube API timed out for video {video_id}")
            return None
        except httpx.HTTPError as e:
            logger.warning(f"YouTube API request failed for video {video_id}: {e}")
            return None

        if not response.is_success:
            logger.warning(
                f"YouTube API returned {response.status_code} for video {video_id}"
            )
            return None

        try:
            payload = response.json()
        except ValueError as e:
            logger.warning(f"YouTube API returned invalid JSON for video {video_id}: {e}")
            return None

        return content_type_from_video_payload(payload)

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
