"""Public Python API for warcembed."""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import httpx

from .allowlist import HostAllowlist
from .origin import probe_origin
from .reference import ALL_KINDS, ArchiveKind, validate_reference
from .transfer import HeaderInput, OutgoingResponse, transfer

LOG = logging.getLogger(__name__)


async def serve_archive(
    client: httpx.AsyncClient,
    allowlist: HostAllowlist,
    method: str,
    archive_url: Optional[str],
    headers: HeaderInput = (),
    accepted: Tuple[ArchiveKind, ...] = ALL_KINDS,
) -> OutgoingResponse:
    """Serve `archive_url` with byte-range semantics.

    Validates the reference, probes the origin once, then either forwards the
    request to a range-capable origin or slices the full object locally.
    Raises an ArchiveProxyError subclass when the request cannot be served.
    A streamed response must be closed with ``OutgoingResponse.aclose``.
    """
    method = (method or "").upper()
    reference = validate_reference(method, archive_url, allowlist, accepted)
    capability = await probe_origin(client, reference)
    return await transfer(client, reference, capability, method, headers)
