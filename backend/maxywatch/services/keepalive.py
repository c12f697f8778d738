"""Keepalive service - periodically requests an external URL.

Some hosts put the target bot to sleep unless its web endpoint is hit
regularly; the dashboard can configure such a URL.
"""
import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

MIN_INTERVAL_SECONDS = 60
DEFAULT_INTERVAL_SECONDS = 300


def keepalive_interval(configured: Optional[int]) -> int:
    """Configured interval, or the default when unset or below the minimum."""
    if configured and configured >= MIN_INTERVAL_SECONDS:
        return configured
    return DEFAULT_INTERVAL_SECONDS


class KeepaliveService:
    """Sends a GET to the keepalive URL. Failures are only logged."""

    def __init__(self, timeout: int = 10):
        self.timeout = timeout

    async def ping(self, url: str) -> Optional[int]:
        """Request ``url`` and return the HTTP status, or None on error."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                response = await client.get(url)
            logger.info(f"[keepalive] {url} {response.status_code}")
            return response.status_code
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"[keepalive] {url} error: {e}")
            return None


# Global instance
keepalive_service = KeepaliveService()
