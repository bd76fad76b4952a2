"""Named constants for URL classification."""

import re

# ---------------------------------------------------------------------------
# Generic hostname parsing
# ---------------------------------------------------------------------------
# Second-level labels of common multi-part TLDs (``co.uk``, ``com.au``...).
# When matched, the platform label is taken one segment earlier.
MULTI_PART_TLD_PREFIXES = frozenset({"co", "com", "org", "net", "gov", "edu"})

UNKNOWN_PLATFORM = "unknown"

# ---------------------------------------------------------------------------
# YouTube
# ---------------------------------------------------------------------------
YOUTUBE_PLATFORM = "youtube"
YOUTUBE_SHORT_HOST = "youtu.be"
YOUTUBE_MAIN_HOST_SUFFIX = "youtube.com"
YOUTUBE_ID_PATH_PREFIXES = frozenset({"embed", "shorts", "live", "v"})
YOUTUBE_VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")

YOUTUBE_API_PARTS = "snippet,topicDetails"
YOUTUBE_MUSIC_CATEGORY_ID = "10"
# Matched case-insensitively as substrings of topicDetails.topicCategories
YOUTUBE_MUSIC_TOPIC_HINTS = ("/wiki/Music", "/m/04rlf")
