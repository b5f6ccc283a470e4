"""Transfer orchestration: pass-through to range-capable origins, polyfill otherwise.

The pass-through path forwards the client's request (including its ``Range``
header) and relays whatever the origin answers. The polyfill path downloads
the whole object once, resolves the client's ``Range`` header locally and
answers ``206`` with the requested slice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Optional, Tuple, Union

import httpx

from .errors import OriginUnreachable
from .headers import empty_object_headers, passthrough_headers, polyfill_headers
from .origin import OriginCapability
from .ranges import parse_range_header
from .reference import ArchiveReference

LOG = logging.getLogger(__name__)

HeaderInput = Union[Mapping[str, str], Iterable[Tuple[str, str]]]

# Describe the client connection rather than the request; never forwarded.
HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "proxy-connection",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
        "host",
        "content-length",
        "accept-encoding",
    }
)


@dataclass
class OutgoingResponse:
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    upstream: Optional[httpx.Response] = None

    @property
    def streaming(self) -> bool:
        return self.upstream is not None

    async def aclose(self) -> None:
        if self.upstream is not None:
            await self.upstream.aclose()


def forwardable_headers(headers: HeaderInput) -> httpx.Headers:
    """Client headers minus hop-by-hop and connection-specific ones."""
    incoming = httpx.Headers(headers)
    return httpx.Headers([(k, v) for k, v in incoming.multi_items() if k.lower() not in HOP_BY_HOP_HEADERS])


async def _send(client: httpx.AsyncClient, request: httpx.Request, stream: bool = False) -> httpx.Response:
    try:
        return await client.send(request, stream=stream)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        LOG.warning("%s %s failed: %s", request.method, request.url, e)
        raise OriginUnreachable(f"{request.method} {request.url} failed: {e}") from e


async def pass_through(
    client: httpx.AsyncClient,
    reference: ArchiveReference,
    method: str,
    headers: HeaderInput,
) -> OutgoingResponse:
    """Forward the client's request and relay the origin's status and body."""
    request = client.build_request(method, reference.raw_url, headers=forwardable_headers(headers))
    upstream = await _send(client, request, stream=True)
    out_headers = passthrough_headers(reference.kind, upstream.headers)
    if method == "HEAD":
        await upstream.aclose()
        return OutgoingResponse(upstream.status_code, out_headers)
    return OutgoingResponse(upstream.status_code, out_headers, upstream=upstream)


async def polyfill(
    client: httpx.AsyncClient,
    reference: ArchiveReference,
    capability: OriginCapability,
    method: str,
    headers: HeaderInput,
) -> OutgoingResponse:
    """Fetch the whole object and serve the requested slice with 206."""
    # Without a declared length a HEAD cannot describe the range; measure a GET.
    fetch_method = method if capability.total_length is not None else "GET"
    response = await _send(client, client.build_request(fetch_method, reference.raw_url), stream=True)
    try:
        if not response.is_success:
            raise OriginUnreachable(f"{fetch_method} {reference.raw_url} returned {response.status_code}")
        # Raw bytes: offsets refer to the stored object even if the origin sets Content-Encoding.
        data = b"".join([chunk async for chunk in response.aiter_raw()]) if fetch_method == "GET" else b""
    except httpx.HTTPError as e:
        LOG.warning("%s %s failed while reading: %s", fetch_method, reference.raw_url, e)
        raise OriginUnreachable(f"{fetch_method} {reference.raw_url} failed: {e}") from e
    finally:
        await response.aclose()

    total_length = capability.total_length
    if fetch_method == "GET":
        if total_length is not None and total_length != len(data):
            LOG.warning(
                "%s declared %s bytes but sent %s; using the measured size",
                reference.raw_url,
                total_length,
                len(data),
            )
        total_length = len(data)

    if total_length == 0:
        return OutgoingResponse(200, empty_object_headers(reference.kind, response.headers))

    byte_range = parse_range_header(httpx.Headers(headers).get("range"), total_length)
    if method == "HEAD":
        body = b""
        body_length = byte_range.length
    else:
        body = byte_range.slice(data)
        body_length = len(body)

    out_headers = polyfill_headers(reference.kind, byte_range, total_length, body_length, response.headers)
    return OutgoingResponse(206, out_headers, body=body)


async def transfer(
    client: httpx.AsyncClient,
    reference: ArchiveReference,
    capability: OriginCapability,
    method: str,
    headers: HeaderInput,
) -> OutgoingResponse:
    """Pick the transfer path from the probed capability and run it."""
    if capability.supports_range:
        LOG.debug("pass-through for %s", reference.raw_url)
        return await pass_through(client, reference, method, headers)
    LOG.debug("polyfill for %s (total_length=%s)", reference.raw_url, capability.total_length)
    return await polyfill(client, reference, capability, method, headers)
