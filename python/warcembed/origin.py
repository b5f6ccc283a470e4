"""Origin capability probing."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Mapping, Optional

import httpx

from .errors import OriginUnreachable
from .reference import ArchiveReference

LOG = logging.getLogger(__name__)

_DIGITS = re.compile(r"\d+")


@dataclass(frozen=True)
class OriginCapability:
    supports_range: bool
    total_length: Optional[int] = None


def declared_length(headers: Mapping[str, str]) -> Optional[int]:
    value = (headers.get("content-length") or "").strip()
    return int(value) if _DIGITS.fullmatch(value) else None


def advertises_byte_ranges(headers: Mapping[str, str]) -> bool:
    """True if Accept-Ranges lists the `bytes` unit (`none` does not count)."""
    value = headers.get("accept-ranges") or ""
    return any(unit.strip().lower() == "bytes" for unit in value.split(","))


def capability_from_headers(headers: Mapping[str, str]) -> OriginCapability:
    """Range support needs both the `bytes` unit and a known length."""
    total_length = declared_length(headers)
    supports_range = advertises_byte_ranges(headers) and total_length is not None
    return OriginCapability(supports_range=supports_range, total_length=total_length)


async def probe_origin(client: httpx.AsyncClient, reference: ArchiveReference) -> OriginCapability:
    """HEAD the archive URL; no client headers are forwarded."""
    try:
        response = await client.head(reference.raw_url)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        LOG.warning("probe of %s failed: %s", reference.raw_url, e)
        raise OriginUnreachable(f"probe of {reference.raw_url} failed: {e}") from e
    if not response.is_success:
        LOG.warning("probe of %s returned %s", reference.raw_url, response.status_code)
        raise OriginUnreachable(f"probe of {reference.raw_url} returned {response.status_code}")

    capability = capability_from_headers(response.headers)
    LOG.debug(
        "probe of %s: supports_range=%s total_length=%s",
        reference.raw_url,
        capability.supports_range,
        capability.total_length,
    )
    return capability
