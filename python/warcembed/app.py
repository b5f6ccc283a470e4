from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional, Tuple

import httpx
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import HTMLResponse, Response, StreamingResponse
from starlette.background import BackgroundTask
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .api import serve_archive
from .config import Settings, load_settings
from .embed import ORIGINAL_URL_PARAM, build_embed_page, load_template
from .errors import ArchiveProxyError, MethodNotAllowed
from .headers import error_headers
from .net import build_client
from .reference import ALL_KINDS, ARCHIVE_URL_PARAM, ArchiveKind
from .transfer import OutgoingResponse

LOG = logging.getLogger(__name__)

# Registered for every method so the validator, not the router, answers 405.
ANY_METHOD = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def to_response(outgoing: OutgoingResponse) -> Response:
    """Convert an OutgoingResponse into a Starlette response."""
    if outgoing.streaming:
        return StreamingResponse(
            outgoing.upstream.aiter_raw(),
            status_code=outgoing.status,
            headers=outgoing.headers,
            background=BackgroundTask(outgoing.aclose),
        )
    return Response(content=outgoing.body, status_code=outgoing.status, headers=outgoing.headers)


def create_app(settings: Optional[Settings] = None, client: Optional[httpx.AsyncClient] = None) -> FastAPI:
    """Build the proxy app. An injected client is used as-is and never closed."""
    settings = settings or load_settings()
    template = load_template(settings.embed_template)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = None
        if app.state.http_client is None:
            owned = app.state.http_client = build_client(settings)
        LOG.info("warcembed %s starting with %d allowed hosts", __version__, len(settings.allowlist))
        try:
            yield
        finally:
            if owned is not None:
                await owned.aclose()
                app.state.http_client = None
            LOG.info("warcembed shutting down")

    app = FastAPI(title="warcembed", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.http_client = client

    @app.exception_handler(ArchiveProxyError)
    async def _archive_error(request: Request, exc: ArchiveProxyError) -> Response:
        LOG.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc)
        return Response(status_code=exc.status_code, headers=error_headers(exc))

    @app.exception_handler(StarletteHTTPException)
    async def _router_error(request: Request, exc: StarletteHTTPException) -> Response:
        # Methods outside ANY_METHOD are refused by the router itself.
        if exc.status_code == 405:
            return await _archive_error(request, MethodNotAllowed(f"method {request.method!r} is not allowed"))
        return await http_exception_handler(request, exc)

    async def _serve(request: Request, accepted: Tuple[ArchiveKind, ...]) -> Response:
        http_client = request.app.state.http_client
        if http_client is None:
            raise RuntimeError("HTTP client not initialised; run the app through its lifespan")
        outgoing = await serve_archive(
            http_client,
            settings.allowlist,
            request.method,
            request.query_params.get(ARCHIVE_URL_PARAM),
            request.headers.items(),
            accepted,
        )
        LOG.info("%s %s -> %s", request.method, request.url.path, outgoing.status)
        return to_response(outgoing)

    @app.api_route("/archive", methods=ANY_METHOD, include_in_schema=False)
    async def archive(request: Request):
        return await _serve(request, ALL_KINDS)

    @app.api_route("/archive.wacz", methods=ANY_METHOD, include_in_schema=False)
    async def archive_wacz(request: Request):
        return await _serve(request, (ArchiveKind.WACZ,))

    @app.api_route("/archive.warc.gz", methods=ANY_METHOD, include_in_schema=False)
    async def archive_warc_gz(request: Request):
        return await _serve(request, (ArchiveKind.WARC_GZ,))

    @app.api_route("/embed", methods=ANY_METHOD, include_in_schema=False)
    async def embed(request: Request):
        page = build_embed_page(
            request.method,
            request.query_params.get(ARCHIVE_URL_PARAM),
            request.query_params.get(ORIGINAL_URL_PARAM),
            template,
        )
        return HTMLResponse(page, headers={"access-control-allow-origin": "*"})

    return app


app = create_app()
