"""URL classifier: raw URL -> (domain, platform, content type).

Composes hostname normalization, platform resolution, content-type
resolution and, for YouTube videos only, the optional API refinement.
Classification never fails outward; unparseable input yields
``UrlClassification.fallback()``.
"""

import logging
import re
from typing import Any, Optional
from urllib.parse import SplitResult, urlsplit

from app.config import get_settings
from app.models.bookmark import ContentType, UrlClassification
from app.services.classifier.constants import YOUTUBE_PLATFORM
from app.services.classifier.content_type import resolve_content_type
from app.services.classifier.hostname import normalize_hostname, resolve_platform
from app.services.classifier.youtube import (
    YouTubeCategoryResolver,
    extract_youtube_video_id,
)

logger = logging.getLogger(__name__)

# Singleton state
_classifier: Optional["UrlClassifier"] = None

# Whitespace, control characters and delimiters that cannot appear in a host
_FORBIDDEN_HOST_CHARS_RE = re.compile(r"[\x00-\x20\x7f#/<>?@\[\\\]^|%\"{}`]")


def parse_absolute_url(url: Any) -> Optional[SplitResult]:
    """Split ``url`` if it is an absolute URL with a valid host and port, else ``None``."""
    if not isinstance(url, str):
        return None
    try:
        parsed = urlsplit(url.strip())
        hostname = parsed.hostname
        # Raises for non-numeric or out-of-range ports
        parsed.port
    except ValueError:
        return None
    if not parsed.scheme or not hostname:
        return None
    if _FORBIDDEN_HOST_CHARS_RE.search(hostname):
        return None
    return parsed


class UrlClassifier:
    """Classifies bookmark URLs. Stateless apart from the injected API client."""

    def __init__(self, youtube_resolver: YouTubeCategoryResolver) -> None:
        self.youtube_resolver = youtube_resolver

    async def classify(self, url: Any) -> UrlClassification:
        parsed = parse_absolute_url(url)
        if parsed is None:
            logger.debug(f"Unparseable bookmark URL, using fallback: {url!r}")
            return UrlClassification.fallback()

        domain = normalize_hostname(parsed.hostname or "")
        platform = resolve_platform(domain)
        content_type = resolve_content_type(platform, parsed.path)

        if platform == YOUTUBE_PLATFORM and content_type == ContentType.VIDEO:
            refined = await self._refine_youtube(parsed)
            if refined is not None:
                content_type = refined

        return UrlClassification(
            domain=domain, platform=platform, content_type=content_type
        )

    async def _refine_youtube(self, parsed: SplitResult) -> Optional[ContentType]:
        if not self.youtube_resolver.enabled:
            return None
        video_id = extract_youtube_video_id(parsed)
        if video_id is None:
            return None
        return await self.youtube_resolver.resolve(video_id)

    async def aclose(self) -> None:
        await self.youtube_resolver.aclose()


# =====================================================================
# Singleton factory
# =====================================================================


def get_url_classifier() -> UrlClassifier:
    """Get or create the singleton ``UrlClassifier`` from settings."""
    global _classifier
    if _classifier is None:
        settings = get_settings()
        _classifier = UrlClassifier(
            YouTubeCategoryResolver(
                settings.youtube_api_key,
                base_url=settings.youtube_api_base_url,
                timeout=settings.youtube_api_timeout,
            )
        )
    return _classifier


def reset_url_classifier() -> None:
    """Reset classifier for testing."""
    global _classifier
    _classifier = None


async def classify_url(url: Any) -> UrlClassification:
    """Classify ``url`` with the shared classifier."""
    return await get_url_classifier().classify(url)
