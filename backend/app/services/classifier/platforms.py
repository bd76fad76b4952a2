"""Registry of known platforms.

One table drives both lookups used by the classifier:

- ``PLATFORM_BY_DOMAIN``: exact hostname (or root domain) -> slug, for hosts
  whose platform generic hostname parsing gets wrong.
- ``PLATFORM_TO_CONTENT_TYPE``: slug -> content-type bucket.
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from app.models.bookmark import ContentType, PlatformInfo


@dataclass(frozen=True)
class PlatformDefinition:
    label: str
    content_type: ContentType
    domains: tuple[str, ...] = field(default_factory=tuple)


_A = ContentType.ARTICLE
_D = ContentType.DOCUMENT
_M = ContentType.MUSIC
_O = ContentType.OTHER
_P = ContentType.PODCAST
_S = ContentType.SOCIAL
_V = ContentType.VIDEO

PLATFORMS: Mapping[str, PlatformDefinition] = MappingProxyType(
    {
        "amazon-music": PlatformDefinition("Amazon Music", _M, ("music.amazon.com",)),
        "apple-music": PlatformDefinition("Apple Music", _M, ("music.apple.com",)),
        "apple-news": PlatformDefinition("Apple News", _P, ("apple.news",)),
        "apple-podcasts": PlatformDefinition(
            "Apple Podcasts", _P, ("podcasts.apple.com",)
        ),
        "audible": PlatformDefinition("Audible", _P, ("audible.com",)),
        "audiomack": PlatformDefinition("Audiomack", _M),
        "bandcamp": PlatformDefinition("Bandcamp", _M),
        "bilibili": PlatformDefinition("Bilibili", _V),
        "bluesky": PlatformDefinition("Bluesky", _S, ("bsky.app",)),
        "canva": PlatformDefinition("Canva", _D),
        "castbox": PlatformDefinition("Castbox", _P),
        "dailymotion": PlatformDefinition("Dailymotion", _V),
        "deezer": PlatformDefinition("Deezer", _M),
        "discord": PlatformDefinition("Discord", _S, ("discord.gg",)),
        "dropbox": PlatformDefinition("Dropbox", _D),
        "facebook": PlatformDefinition("Facebook", _S),
        "figma": PlatformDefinition("Figma", _D),
        "google-docs": PlatformDefinition("Google Docs", _D, ("docs.google.com",)),
        "google-drive": PlatformDefinition("Google Drive", _D, ("drive.google.com",)),
        "hacker-news": PlatformDefinition(
            "Hacker News", _S, ("news.ycombinator.com",)
        ),
        "instagram": PlatformDefinition("Instagram", _S),
        "linkedin": PlatformDefinition("LinkedIn", _S),
        "loom": PlatformDefinition("Loom", _V),
        "mastodon": PlatformDefinition("Mastodon", _S),
        "notion": PlatformDefinition("Notion", _D),
        "onedrive": PlatformDefinition("OneDrive", _D, ("onedrive.live.com",)),
        "other": PlatformDefinition("Other", _O),
        "overcast": PlatformDefinition("Overcast", _P),
        "pinterest": PlatformDefinition("Pinterest", _S),
        "pocket-casts": PlatformDefinition("Pocket Casts", _P, ("pca.st",)),
        "reddit": PlatformDefinition("Reddit", _S),
        "scribd": PlatformDefinition("Scribd", _D),
        "sharepoint": PlatformDefinition("SharePoint", _D),
        "slideshare": PlatformDefinition("SlideShare", _D),
        "snapchat": PlatformDefinition("Snapchat", _S),
        "soundcloud": PlatformDefinition("SoundCloud", _M),
        "spotify": PlatformDefinition("Spotify", _M),
        "substack": PlatformDefinition("Substack", _P),
        "threads": PlatformDefinition("Threads", _S),
        "tidal": PlatformDefinition("Tidal", _M),
        "tiktok": PlatformDefinition("TikTok", _V),
        "twitch": PlatformDefinition("Twitch", _V),
        "twitter": PlatformDefinition("Twitter", _S),
        "vimeo": PlatformDefinition("Vimeo", _V),
        "x": PlatformDefinition("X", _S),
        "youtube": PlatformDefinition("YouTube", _V, ("youtu.be",)),
        "youtube-music": PlatformDefinition(
            "YouTube Music", _M, ("music.youtube.com",)
        ),
    }
)

PLATFORM_BY_DOMAIN: Mapping[str, str] = MappingProxyType(
    {
        domain.lower(): slug
        for slug, definition in PLATFORMS.items()
        for domain in definition.domains
    }
)

# "article" and "other" buckets stay empty; unmatched platforms default later
PLATFORM_TO_CONTENT_TYPE: Mapping[str, ContentType] = MappingProxyType(
    {
        slug: definition.content_type
        for slug, definition in PLATFORMS.items()
        if definition.content_type not in (_A, _O)
    }
)

_NON_SLUG_RE = re.compile(r"[^a-z0-9]+")


def normalize_platform_slug(value: str) -> str:
    """Turn a free-form platform name into a slug (``"Hacker News"`` -> ``hacker-news``)."""
    slug = value.strip().lower().replace("&", " and ")
    return _NON_SLUG_RE.sub("-", slug).strip("-")


def get_platform_info(platform: str) -> PlatformInfo:
    """Display info for a platform; unknown slugs echo the input as the label."""
    slug = normalize_platform_slug(platform)
    definition: Optional[PlatformDefinition] = PLATFORMS.get(slug)
    if definition is None:
        return PlatformInfo(slug=slug, label=platform, domains=[])
    return PlatformInfo(
        slug=slug,
        label=definition.label,
        domains=list(definition.domains),
        content_type=definition.content_type,
    )


def list_platforms() -> list[PlatformInfo]:
    return [get_platform_info(slug) for slug in sorted(PLATFORMS)]
