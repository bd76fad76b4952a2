"""Hostname normalization and platform resolution."""

from app.services.classifier.constants import MULTI_PART_TLD_PREFIXES, UNKNOWN_PLATFORM
from app.services.classifier.platforms import PLATFORM_BY_DOMAIN


def normalize_hostname(value: str) -> str:
    """Lowercase, drop a leading ``www.`` and trim surrounding whitespace."""
    hostname = value.strip().lower()
    if hostname.startswith("www."):
        hostname = hostname[4:]
    return hostname.strip()


def _labels(hostname: str) -> list[str]:
    return [part for part in normalize_hostname(hostname).split(".") if part]


def get_domain_candidates(hostname: str) -> list[str]:
    """Override lookup keys in priority order: full hostname, then root domain."""
    normalized = normalize_hostname(hostname)
    parts = _labels(normalized)
    if len(parts) < 2:
        return [normalized]
    return [normalized, f"{parts[-2]}.{parts[-1]}"]


def platform_from_hostname(hostname: str) -> str:
    """Derive a platform slug from hostname labels by dropping the TLD.

    ``sub.example.com`` -> ``example``; ``example.co.uk`` -> ``example``.
    This is a heuristic, not a public-suffix lookup.
    """
    parts = _labels(hostname)
    if not parts:
        return UNKNOWN_PLATFORM
    if len(parts) == 1:
        return parts[0]
    if len(parts) >= 3 and parts[-2] in MULTI_PART_TLD_PREFIXES:
        return parts[-3]
    return parts[-2]


def resolve_platform(hostname: str) -> str:
    """Override table first (full hostname, then root domain), then heuristics."""
    for candidate in get_domain_candidates(hostname):
        platform = PLATFORM_BY_DOMAIN.get(candidate)
        if platform:
            return platform
    return platform_from_hostname(hostname)
