"""Shared outbound HTTP client factory."""

from __future__ import annotations

from typing import Optional

import httpx

from . import __version__
from .config import Settings

# Origins must send stored bytes as-is; offsets and lengths refer to them.
IDENTITY_ENCODING = "identity"


def build_client(settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """Return an AsyncClient configured for talking to archive origins."""
    settings = settings or Settings()
    return httpx.AsyncClient(
        timeout=settings.timeout,
        follow_redirects=settings.follow_redirects,
        headers={
            "accept-encoding": IDENTITY_ENCODING,
            "user-agent": f"warcembed/{__version__}",
        },
        transport=transport,
    )
