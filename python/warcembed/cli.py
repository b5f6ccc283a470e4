"""warcembed command-line interface."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import socket
import sys
import time
from dataclasses import replace
from pathlib import Path

from . import __version__
from .config import DEFAULT_TIMEOUT, Settings, load_allowlist, load_settings
from .errors import ArchiveProxyError
from .net import build_client
from .origin import probe_origin
from .reference import parse_archive_url

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _port_in_use(host: str, port: int) -> bool:
    """Return True if host:port is already in use."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.settimeout(0.5)
        return s.connect_ex((host, port)) == 0


def _settings_from_args(args: argparse.Namespace) -> Settings:
    """Environment settings, overridden by any CLI flags given."""
    settings = load_settings()
    if args.allowlist or args.allowlist_file:
        settings = replace(settings, allowlist=load_allowlist(args.allowlist, args.allowlist_file))
    if args.timeout is not None:
        settings = replace(settings, timeout=args.timeout)
    if args.log_level:
        settings = replace(settings, log_level=args.log_level.upper())
    return settings


def cmd_serve(args: argparse.Namespace) -> None:
    """Handle `warcembed serve`."""
    import uvicorn

    from .app import create_app

    settings = _settings_from_args(args)
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    if not len(settings.allowlist):
        print("[serve] Warning: allow list is empty; every archive-url will be rejected", file=sys.stderr)
    if args.port != 0 and _port_in_use(args.host, args.port):
        raise SystemExit(f"Port {args.port} is already in use.")

    print(f"[serve] Allowed hosts: {', '.join(settings.allowlist) or 'none'}")
    print(f"[serve] Open: http://{args.host}:{args.port}/archive?archive-url=...")
    uvicorn.run(create_app(settings), host=args.host, port=args.port, log_level=settings.log_level.lower())


async def _probe(url: str, timeout: float) -> dict:
    reference = parse_archive_url(url)
    async with build_client(Settings(timeout=timeout)) as client:
        capability = await probe_origin(client, reference)
    return {
        "archive_url": reference.raw_url,
        "host": reference.host,
        "kind": reference.kind.suffix,
        "supports_range": capability.supports_range,
        "total_length": capability.total_length,
        "transfer_path": "pass-through" if capability.supports_range else "polyfill",
    }


def cmd_probe(args: argparse.Namespace) -> None:
    """Handle `warcembed probe`."""
    try:
        report = asyncio.run(_probe(args.url, args.timeout))
    except ArchiveProxyError as e:
        print(f"[probe] {e.kind.value}: {e}", file=sys.stderr)
        sys.exit(1)
    print(json.dumps(report, indent=2))


def cmd_origin(args: argparse.Namespace) -> None:
    """Handle `warcembed origin`."""
    from .devorigin import start_origin_server

    directory = Path(args.directory).expanduser().resolve()
    if not directory.is_dir():
        raise SystemExit(f"Directory not found: {directory}")
    try:
        server = start_origin_server(
            args.host,
            args.port,
            directory,
            ranges=not args.no_ranges,
            declare_length=not args.no_length,
        )
    except OSError as e:
        raise SystemExit(f"Failed to start origin on {args.host}:{args.port}: {e}")

    actual_port = server.server_address[1]
    print(f"[origin] Serving {directory} on http://{args.host}:{actual_port}/")
    print(f"[origin] ranges={'off' if args.no_ranges else 'on'} content-length={'off' if args.no_length else 'on'}")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print("\n[origin] Stopping server...")
        server.shutdown()


def build_parser() -> argparse.ArgumentParser:
    """Create the top-level CLI parser."""
    p = argparse.ArgumentParser(prog="warcembed", description="Range-aware web archive proxy (serve, probe, origin)")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = p.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser("serve", help="Run the archive proxy")
    s.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    s.add_argument("--port", type=int, default=8000, help="Port to bind (default: 8000)")
    s.add_argument("--allowlist", help="Comma-separated allowed origin hosts (default: WARCEMBED_ALLOWLIST)")
    s.add_argument("--allowlist-file", help="File with one allowed host per line (default: WARCEMBED_ALLOWLIST_FILE)")
    s.add_argument("--timeout", type=float, help="Origin timeout in seconds (default: WARCEMBED_TIMEOUT or 30)")
    s.add_argument("--log-level", help="Log level (default: WARCEMBED_LOG_LEVEL or INFO)")
    s.set_defaults(func=cmd_serve)

    pr = sub.add_parser("probe", help="Report whether an archive origin supports range requests")
    pr.add_argument("url", help="Archive URL ending in .wacz or .warc.gz")
    pr.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help="Timeout in seconds (default: 30)")
    pr.set_defaults(func=cmd_probe)

    o = sub.add_parser("origin", help="Serve a directory as a test origin")
    o.add_argument("directory", help="Directory containing archives")
    o.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    o.add_argument("--port", type=int, default=8080, help="Port to bind (default: 8080)")
    o.add_argument("--no-ranges", action="store_true", help="Ignore Range headers and omit Accept-Ranges")
    o.add_argument("--no-length", action="store_true", help="Omit Content-Length")
    o.set_defaults(func=cmd_origin)

    return p


def main(argv=None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    try:
        args.func(args)
    except SystemExit:
        raise
    except Exception as e:
        print(f"[error] {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
