"""
Utility functions for the retirement engine.
URL parsing, path segments, token sets and rounding.
"""
import math
from typing import Iterable, List, Optional, Set
from urllib.parse import ParseResult, urlparse


def parse_url(url: str) -> Optional[ParseResult]:
    """
    Parse an absolute URL.
    Returns None for anything without a scheme and host, or that fails to parse.

    Example:
        https://example.com/blog/post/ → ParseResult(...)
        /blog/post/ → None
    """
    if not url:
        return None

    try:
        parsed = urlparse(url.strip())
        # Accessing port validates it; malformed ports raise ValueError
        parsed.port
    except ValueError:
        return None

    if not parsed.scheme or not parsed.netloc:
        return None

    return parsed


def get_path_segments(url: str) -> Optional[List[str]]:
    """
    Non-empty path segments of an absolute URL, or None if the URL is malformed.

    Example:
        https://example.com/service-area/event-planner/brooklyn/
        → ['service-area', 'event-planner', 'brooklyn']
    """
    parsed = parse_url(url)
    if parsed is None:
        return None
    return [p for p in parsed.path.split('/') if p]


def get_origin(url: str) -> Optional[str]:
    """
    Scheme and host of a URL.

    Example:
        https://example.com/blog/post/?page=2 → https://example.com
    """
    parsed = parse_url(url)
    if parsed is None:
        return None
    return f"{parsed.scheme}://{parsed.netloc}"


def get_path(url: str) -> str:
    """Path component of a URL; the raw string when it cannot be parsed."""
    parsed = parse_url(url)
    if parsed is None:
        return url or ''
    return parsed.path


def has_query_string(url: str) -> bool:
    parsed = parse_url(url)
    if parsed is None:
        return '?' in (url or '')
    return bool(parsed.query)


def get_parent_url(url: str) -> Optional[str]:
    """
    Parent URL one path level up, with a trailing slash.
    Single-segment and root paths fall back to the origin root.

    Example:
        https://example.com/blog/old-post → https://example.com/blog/
        https://example.com/old-post → https://example.com/
    """
    origin = get_origin(url)
    if origin is None:
        return None

    segments = get_path_segments(url)
    if len(segments) > 1:
        return f"{origin}/{'/'.join(segments[:-1])}/"

    return f"{origin}/"


def get_topic(url: str, default: str = 'content') -> str:
    """
    Human-readable topic from the last non-empty path segment.

    Example:
        https://example.com/blog/best-dance-shoes/ → 'best dance shoes'
    """
    segments = get_path_segments(url)
    if not segments:
        return default
    return segments[-1].replace('-', ' ')


def tokenize(text: Optional[str]) -> Set[str]:
    """Lower-cased whitespace tokens."""
    if not text:
        return set()
    return set(text.lower().split())


def jaccard(set1: Set[str], set2: Set[str]) -> float:
    """
    Jaccard similarity of two token sets.
    Two empty sets are identical (1.0); one empty set shares nothing (0.0).
    """
    if not set1 and not set2:
        return 1.0
    if not set1 or not set2:
        return 0.0
    return len(set1 & set2) / len(set1 | set2)


def lower_set(values: Iterable[str]) -> Set[str]:
    return {v.lower() for v in values}


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives (2.5 → 3)."""
    return int(math.floor(value + 0.5))


def clamp(value: float, lower: float, upper: float) -> float:
    return min(upper, max(lower, value))
