"""Embed page rendering: fills the viewer template with the two URLs."""

from __future__ import annotations

import html
from importlib import resources
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from .reference import ARCHIVE_URL_PARAM, check_method, parse_absolute_url

ORIGINAL_URL_PARAM = "original-url"


def load_template(path: Optional[Path] = None) -> str:
    """Read a template file, or the packaged `ui/embed.html`."""
    if path is not None:
        return Path(path).read_text(encoding="utf-8")
    return (resources.files("warcembed") / "ui" / "embed.html").read_text(encoding="utf-8")


def archive_format(archive_url: str) -> str:
    return "wacz" if "wacz" in archive_url else "warc.gz"


def render_embed(template: str, archive_url: str, original_url: str) -> str:
    page = template.replace("{{original-url}}", html.escape(original_url, quote=True))
    # Fully percent-encoded: the value lands inside another URL's query string.
    page = page.replace("{{archive-url}}", quote(archive_url, safe=""))
    return page.replace("{{format}}", archive_format(archive_url))


def build_embed_page(method: str, archive_url: Optional[str], original_url: Optional[str], template: str) -> str:
    """Validate both URL parameters and return the rendered page."""
    check_method(method)
    parse_absolute_url(archive_url, ARCHIVE_URL_PARAM)
    parse_absolute_url(original_url, ORIGINAL_URL_PARAM)
    return render_embed(template, archive_url.strip(), original_url.strip())
