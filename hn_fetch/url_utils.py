from __future__ import annotations

from urllib.parse import urlsplit, urlunsplit

from url_normalize import url_normalize


def normalize_url(url: str) -> str:
    """
    Canonicalize the scheme and host of a fetch target (lowercase, IDNA,
    default port dropped). Path, query and fragment are passed through
    byte-for-byte since servers may sign or distinguish encoded characters.
    """
    url = (url or "").strip()
    if not url:
        return ""
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return url
    try:
        origin = urlsplit(url_normalize(f"{parts.scheme}://{parts.netloc}"))
    except Exception:
        return url
    return urlunsplit(
        (origin.scheme, origin.netloc, parts.path, parts.query, parts.fragment)
    )
