import re
from urllib.parse import urlparse

SCHEME_PREFIX = re.compile(r'^[a-z][a-z0-9+.-]*://', re.IGNORECASE)


def normalize_url(url: str) -> str:
    """Add https:// when the URL has no scheme; other schemes are left for validation to reject."""
    url = (url or "").strip()
    if SCHEME_PREFIX.match(url):
        return url
    return "https://" + url


def is_valid_url(url: str) -> bool:
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.hostname)


def domain_of(url: str) -> str:
    try:
        return urlparse(url).hostname or ""
    except ValueError:
        return ""
