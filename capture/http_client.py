import httpx
import logging
from typing import Optional, Dict

from capture.errors import CaptureError

# Default timeout configuration (in seconds)
DEFAULT_TIMEOUT = 10.0
DEFAULT_CONNECT_TIMEOUT = 5.0
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


async def fetch_page(
    url: str,
    headers: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
    connect_timeout: Optional[float] = None,
) -> httpx.Response:
    """
    Fetch a page, following redirects.

    Args:
        url: The URL to fetch
        headers: Extra HTTP headers; a browser User-Agent is sent unless overridden
        timeout: Total request timeout in seconds (default: 10s)
        connect_timeout: Connection timeout in seconds (default: 5s)

    Returns:
        httpx.Response object; ``response.history`` holds any redirects

    Raises:
        CaptureError: on timeouts and transport errors
    """
    logger = logging.getLogger(__name__)
    logger.debug(f"HTTP GET {url} (timeout: {timeout or DEFAULT_TIMEOUT}s)")

    timeout_config = httpx.Timeout(
        timeout=timeout or DEFAULT_TIMEOUT,
        connect=connect_timeout or DEFAULT_CONNECT_TIMEOUT
    )
    request_headers = {"User-Agent": DEFAULT_USER_AGENT}
    request_headers.update(headers or {})

    try:
        async with httpx.AsyncClient(timeout=timeout_config, follow_redirects=True) as client:
            response = await client.get(url, headers=request_headers)
            logger.debug(f"HTTP {response.status_code} {url} ({len(response.text)} bytes)")
            # Status codes are not errors here; the page is classified as served
            return response
    except httpx.TimeoutException as e:
        logger.warning(f"HTTP timeout for {url}: {e}")
        raise CaptureError(f"Timed out fetching {url}") from e
    except httpx.RequestError as e:
        logger.warning(f"HTTP request error for {url}: {e}")
        raise CaptureError(f"Failed to fetch {url}: {e}") from e
