"""
Shared HTTP client for fetching third-party pages
"""
from typing import Optional

import httpx

from harties.core.config import settings


def create_http_client(transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """Browser-like client used by the scrapers"""
    return httpx.AsyncClient(
        timeout=settings.http_timeout,
        headers={
            "User-Agent": settings.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        },
        follow_redirects=True,
        transport=transport,
    )
