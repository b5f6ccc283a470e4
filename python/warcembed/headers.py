"""Outgoing header sets for archive responses."""

from __future__ import annotations

from typing import Dict, Mapping, Optional

from .errors import ArchiveProxyError
from .ranges import ByteRange
from .reference import ArchiveKind

EXPOSED_HEADERS = "Content-Range, Content-Length, Accept-Ranges, ETag"


def base_headers(kind: Optional[ArchiveKind] = None) -> Dict[str, str]:
    """CORS and range advertisement, plus type/disposition when the kind is known."""
    headers = {
        "access-control-allow-origin": "*",
        "access-control-expose-headers": EXPOSED_HEADERS,
        "accept-ranges": "bytes",
    }
    if kind is not None:
        headers["content-type"] = kind.content_type
        headers["content-disposition"] = kind.content_disposition
    return headers


def _copy_etag(headers: Dict[str, str], origin_headers: Mapping[str, str]) -> None:
    etag = origin_headers.get("etag")
    if etag:
        headers["etag"] = etag


def passthrough_headers(kind: ArchiveKind, origin_headers: Mapping[str, str]) -> Dict[str, str]:
    """Headers for a response relayed from a range-capable origin."""
    headers = base_headers(kind)
    for name in ("content-length", "content-range"):
        value = origin_headers.get(name)
        if value is not None:
            headers[name] = value
    _copy_etag(headers, origin_headers)
    return headers


def polyfill_headers(
    kind: ArchiveKind,
    byte_range: ByteRange,
    total_length: int,
    body_length: int,
    origin_headers: Mapping[str, str],
) -> Dict[str, str]:
    """Headers for a locally sliced response."""
    headers = base_headers(kind)
    headers["content-range"] = byte_range.content_range(total_length)
    headers["content-length"] = str(body_length)
    _copy_etag(headers, origin_headers)
    return headers


def empty_object_headers(kind: ArchiveKind, origin_headers: Mapping[str, str]) -> Dict[str, str]:
    headers = base_headers(kind)
    headers["content-length"] = "0"
    _copy_etag(headers, origin_headers)
    return headers


def error_headers(error: ArchiveProxyError) -> Dict[str, str]:
    headers = base_headers()
    headers.update(error.headers)
    return headers
