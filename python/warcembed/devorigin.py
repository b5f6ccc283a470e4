"""Development origin server that imitates range-capable and range-less hosts."""

from __future__ import annotations

import os
import threading
from functools import partial
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Union


class OriginHandler(SimpleHTTPRequestHandler):
    ranges = True
    declare_length = True
    quiet = False

    def send_head(self):
        path = self.translate_path(self.path)
        if not os.path.isfile(path):
            self.send_error(404, "File not found")
            return None

        # Use getsize so we don't open a transient fd that can close early
        size = os.path.getsize(path)
        start, end = 0, size - 1
        status = 200

        range_header = self.headers.get("Range") if self.ranges else None
        if range_header:
            try:
                # Parse Range header: bytes=START-END
                _, r = range_header.strip().split("=", 1)
                start_s, end_s = r.split("-")
                start = int(start_s)
                end = int(end_s) if end_s else size - 1
                if start >= size:
                    raise ValueError()
                end = min(end, size - 1)
            except ValueError:
                self.send_error(416, "Invalid Range")
                return None
            status = 206

        try:
            f = open(path, "rb")
        except OSError:
            self.send_error(404, "File not found")
            return None

        self.send_response(status)
        self.send_header("Content-Type", self.guess_type(path))
        if self.ranges:
            self.send_header("Accept-Ranges", "bytes")
        if status == 206:
            self.send_header("Content-Range", f"bytes {start}-{end}/{size}")
        if self.declare_length:
            self.send_header("Content-Length", str(end - start + 1))
        self.send_header("ETag", f'"{size:x}-{int(os.path.getmtime(path)):x}"')
        self.end_headers()

        f.seek(start)
        self._remaining = end - start + 1
        return f

    def copyfile(self, source, outputfile):
        bufsize = 64 * 1024
        remaining = self._remaining
        while remaining > 0:
            chunk = source.read(min(bufsize, remaining))
            if not chunk:
                break
            outputfile.write(chunk)
            remaining -= len(chunk)

    def log_message(self, fmt, *args):
        if self.quiet:
            return
        super().log_message(fmt, *args)


def make_handler(directory: Union[str, Path], ranges: bool = True, declare_length: bool = True, quiet: bool = False):
    """Return an OriginHandler subclass bound to `directory`."""
    handler = type(
        "ConfiguredOriginHandler",
        (OriginHandler,),
        {"ranges": ranges, "declare_length": declare_length, "quiet": quiet},
    )
    return partial(handler, directory=str(directory))


def start_origin_server(
    host: str,
    port: int,
    directory: Union[str, Path],
    ranges: bool = True,
    declare_length: bool = True,
    quiet: bool = False,
) -> ThreadingHTTPServer:
    """Start a threaded origin server on a daemon thread and return it."""
    server = ThreadingHTTPServer((host, port), make_handler(directory, ranges, declare_length, quiet))
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return server
