"""Static (non-rendering) capture of a page over plain HTTP.

No scripts run, so the activity queue and global probe stay empty and the only
network events are the document request and its redirects. Use a browser-driven
capture and ``capture.observation_io`` when runtime evidence matters.
"""
import re
import time
import logging
from typing import Dict, Optional
from urllib.parse import urljoin

from capture.errors import InvalidTargetError
from capture.http_client import fetch_page
from capture.session import CaptureSession
from core.observation import Observation
from core.url_utils import normalize_url, is_valid_url

SCRIPT_SRC_PATTERN = r'<script\s+[^>]*src=["\']([^"\']+)["\']'
INLINE_SCRIPT_PATTERN = r'<script(?![^>]*\bsrc\s*=)[^>]*>(.*?)</script>'


async def capture_static(
    url: str,
    headers: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
) -> Observation:
    """Fetch ``url`` and return a finalized Observation of its markup and scripts.

    Raises:
        InvalidTargetError: when the URL is not http(s)
        CaptureError: when the page cannot be fetched
    """
    logger = logging.getLogger(__name__)
    target = normalize_url(url)
    if not is_valid_url(target):
        raise InvalidTargetError(f"Invalid URL provided: {url}")

    session = CaptureSession(target)
    response = await fetch_page(target, headers=headers, timeout=timeout)
    fetched_at = time.time()

    for hop in response.history:
        session.record_request(str(hop.url), fetched_at)
    final_url = str(response.url)
    session.record_request(final_url, fetched_at)

    html = response.text
    session.set_markup(html)
    session.add_script_sources(urljoin(final_url, src) for src in re.findall(SCRIPT_SRC_PATTERN, html, re.IGNORECASE))
    bodies = [body for body in re.findall(INLINE_SCRIPT_PATTERN, html, re.IGNORECASE | re.DOTALL) if body.strip()]
    session.add_script_bodies(bodies)
    logger.debug(f"Static capture of {final_url}: status={response.status_code}, {len(bodies)} inline scripts")

    return session.finalize()
