"""Validation of the `archive-url` parameter."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple
from urllib.parse import SplitResult, urlsplit

import httpx

from .allowlist import HostAllowlist
from .errors import InvalidReference, MethodNotAllowed

LOG = logging.getLogger(__name__)

ARCHIVE_URL_PARAM = "archive-url"
ALLOWED_METHODS = ("GET", "HEAD")
ALLOWED_SCHEMES = ("http", "https")
DEFAULT_PORTS = {"http": 80, "https": 443}


class ArchiveKind(Enum):
    WACZ = ".wacz"
    WARC_GZ = ".warc.gz"

    @property
    def suffix(self) -> str:
        return self.value

    @property
    def content_type(self) -> str:
        return "binary/octet-stream" if self is ArchiveKind.WACZ else "application/x-gzip"

    @property
    def filename(self) -> str:
        return f"archive{self.value}"

    @property
    def content_disposition(self) -> str:
        return f'attachment; filename="{self.filename}"'


ALL_KINDS: Tuple[ArchiveKind, ...] = (ArchiveKind.WACZ, ArchiveKind.WARC_GZ)


@dataclass(frozen=True)
class ArchiveReference:
    raw_url: str
    scheme: str
    host: str
    kind: ArchiveKind


def check_method(method: str) -> str:
    """Return the upper-cased method, or raise MethodNotAllowed."""
    normalized = (method or "").upper()
    if normalized not in ALLOWED_METHODS:
        raise MethodNotAllowed(f"method {method!r} is not allowed")
    return normalized


def host_of(parts: SplitResult) -> str:
    """Render `host[:port]` the way a browser's URL.host does (default port dropped)."""
    hostname = parts.hostname
    if not hostname:
        raise InvalidReference("URL has no host")
    try:
        port = parts.port
    except ValueError as e:
        raise InvalidReference(f"invalid port: {e}") from e
    if ":" in hostname:
        hostname = f"[{hostname}]"
    if port is not None and DEFAULT_PORTS.get(parts.scheme) != port:
        return f"{hostname}:{port}"
    return hostname


def parse_absolute_url(raw_url: Optional[str], param: str = ARCHIVE_URL_PARAM) -> SplitResult:
    """Split an absolute http(s) URL, raising InvalidReference otherwise."""
    if not raw_url:
        raise InvalidReference(f'"{param}" is missing')
    try:
        parts = urlsplit(raw_url.strip())
    except ValueError as e:
        raise InvalidReference(f'"{param}" is not a valid URL: {e}') from e
    if not parts.scheme or not parts.netloc:
        raise InvalidReference(f'"{param}" must be an absolute URL')
    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidReference(f'"{param}" must start with http(s)://')
    host_of(parts)
    # urlsplit tolerates characters (e.g. control bytes) the HTTP client refuses.
    try:
        httpx.URL(raw_url.strip())
    except httpx.InvalidURL as e:
        raise InvalidReference(f'"{param}" is not a valid URL: {e}') from e
    return parts


def archive_kind(path: str, accepted: Tuple[ArchiveKind, ...] = ALL_KINDS) -> ArchiveKind:
    for kind in accepted:
        if path.endswith(kind.suffix):
            return kind
    suffixes = " or ".join(f'"{k.suffix}"' for k in accepted)
    raise InvalidReference(f'"{ARCHIVE_URL_PARAM}" must end with {suffixes}')


def parse_archive_url(raw_url: Optional[str], accepted: Tuple[ArchiveKind, ...] = ALL_KINDS) -> ArchiveReference:
    """Build an ArchiveReference without consulting the allowlist."""
    parts = parse_absolute_url(raw_url)
    kind = archive_kind(parts.path, accepted)
    return ArchiveReference(
        raw_url=raw_url.strip(),
        scheme=parts.scheme.lower(),
        host=host_of(parts),
        kind=kind,
    )


def validate_reference(
    method: str,
    raw_url: Optional[str],
    allowlist: HostAllowlist,
    accepted: Tuple[ArchiveKind, ...] = ALL_KINDS,
) -> ArchiveReference:
    """Check method, URL shape, suffix and host; no network access."""
    check_method(method)
    reference = parse_archive_url(raw_url, accepted)
    if not allowlist.contains(reference.host):
        raise InvalidReference(f'"{ARCHIVE_URL_PARAM}" host {reference.host!r} is not in the allow list')
    return reference
