"""Image URI filtering.

Only remote ``http(s)`` URLs may reach durable storage. Local file URIs,
data URIs and blanks are artifacts of on-device picking and are dropped.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass

import structlog

logger = structlog.get_logger()

_REMOTE_URL = re.compile(r"^(https?)://", re.IGNORECASE)


@dataclass(frozen=True)
class ImageRow:
    """Image row ready for insertion."""

    image_url: str
    sort_order: int
    is_primary: bool


def is_remote_url(uri: str | None) -> bool:
    """Check whether a URI is an ``http://`` or ``https://`` URL."""
    return bool(uri) and bool(_REMOTE_URL.match(uri.strip()))


def normalize_remote_url(uri: str | None) -> str | None:
    """Trim a remote URL and lowercase its scheme.

    Returns:
        The URL starting with ``http://`` or ``https://``, or None when
        the URI is not remote.
    """
    if not uri:
        return None
    uri = uri.strip()
    match = _REMOTE_URL.match(uri)
    if match is None:
        return None
    return match.group(1).lower() + uri[len(match.group(1)):]


def filter_image_urls(uris: Iterable[str | None]) -> list[str]:
    """Keep remote URLs, in input order.

    Args:
        uris: Raw URIs from picker, camera or URL field.

    Returns:
        Trimmed remote URLs with lowercase schemes.
    """
    kept: list[str] = []
    dropped = 0
    for uri in uris:
        url = normalize_remote_url(uri)
        if url is not None:
            kept.append(url)
        else:
            dropped += 1
    if dropped:
        logger.info("Dropped non-remote image URIs", dropped=dropped, kept=len(kept))
    return kept


def build_image_rows(uris: Iterable[str | None], placeholder_url: str) -> list[ImageRow]:
    """Filter URIs and lay them out as image rows.

    Args:
        uris: Raw URIs.
        placeholder_url: Used alone when nothing survives filtering.

    Returns:
        Rows with ``sort_order`` 0..n-1; only row 0 is primary.
    """
    urls = filter_image_urls(uris) or [placeholder_url]
    return [
        ImageRow(image_url=url, sort_order=index, is_primary=index == 0)
        for index, url in enumerate(urls)
    ]
