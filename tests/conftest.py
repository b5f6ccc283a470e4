from __future__ import annotations

import asyncio
from typing import List, Optional

import httpx
import pytest

from warcembed.allowlist import Allowlist
from warcembed.api import serve_archive
from warcembed.net import build_client
from warcembed.reference import ALL_KINDS

ALLOWED_HOST = "allowed.example"
WACZ_URL = f"https://{ALLOWED_HOST}/foo.wacz"
WARC_GZ_URL = f"https://{ALLOWED_HOST}/foo.warc.gz"
BLOCKED_WACZ_URL = "https://blocked.example/foo.wacz"

ALLOWLIST = Allowlist([ALLOWED_HOST])


def sample_bytes(n: int = 1000) -> bytes:
    return bytes(i % 251 for i in range(n))


class FakeOrigin:
    """MockTransport handler imitating an archive host."""

    def __init__(
        self,
        data: bytes = b"",
        ranges: bool = True,
        declare_length: bool = True,
        etag: Optional[str] = None,
        status: int = 200,
        error: Optional[Exception] = None,
    ):
        self.data = data
        self.ranges = ranges
        self.declare_length = declare_length
        self.etag = etag
        self.status = status
        self.error = error
        self.requests: List[httpx.Request] = []

    @property
    def methods(self) -> List[str]:
        return [r.method for r in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.status >= 300:
            return httpx.Response(self.status)

        status = 200
        body = self.data
        headers = {"content-type": "application/octet-stream"}
        range_header = request.headers.get("range")
        if self.ranges:
            headers["accept-ranges"] = "bytes"
            if range_header:
                start_s, end_s = range_header.replace("bytes=", "").split("-")
                start = int(start_s)
                end = min(int(end_s) if end_s else len(self.data) - 1, len(self.data) - 1)
                body = self.data[start : end + 1]
                headers["content-range"] = f"bytes {start}-{end}/{len(self.data)}"
                status = 206
        if self.declare_length:
            headers["content-length"] = str(len(body))
        if self.etag:
            headers["etag"] = self.etag
        if request.method == "HEAD":
            body = b""
        return httpx.Response(status, headers=headers, stream=httpx.ByteStream(body))


def run_serve(origin: FakeOrigin, method: str = "GET", url: Optional[str] = WACZ_URL, headers=(), accepted=ALL_KINDS):
    """Run serve_archive against a fake origin, reading any streamed body."""

    async def go():
        async with build_client(transport=httpx.MockTransport(origin)) as client:
            outgoing = await serve_archive(client, ALLOWLIST, method, url, headers, accepted)
            if outgoing.streaming:
                chunks = [chunk async for chunk in outgoing.upstream.aiter_raw()]
                await outgoing.aclose()
                outgoing.body = b"".join(chunks)
            return outgoing

    return asyncio.run(go())


@pytest.fixture
def data() -> bytes:
    return sample_bytes()
