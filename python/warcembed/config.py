"""Environment-driven settings, read once at start-up."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from .allowlist import Allowlist

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class Settings:
    allowlist: Allowlist = field(default_factory=Allowlist)
    timeout: float = DEFAULT_TIMEOUT
    follow_redirects: bool = True
    embed_template: Optional[Path] = None
    log_level: str = "INFO"


def load_allowlist(hosts: Optional[str] = None, path: Optional[str] = None) -> Allowlist:
    """Merge an inline host list with an optional allowlist file."""
    allowlist = Allowlist.from_string(hosts or "")
    if path:
        allowlist = allowlist.union(Allowlist.from_file(Path(path).expanduser()))
    return allowlist


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from WARCEMBED_* environment variables."""
    env = os.environ if environ is None else environ
    template = env.get("WARCEMBED_EMBED_TEMPLATE")
    try:
        timeout = float(env.get("WARCEMBED_TIMEOUT", DEFAULT_TIMEOUT))
    except ValueError as e:
        raise ValueError(f"WARCEMBED_TIMEOUT must be a number: {e}") from e
    return Settings(
        allowlist=load_allowlist(env.get("WARCEMBED_ALLOWLIST"), env.get("WARCEMBED_ALLOWLIST_FILE")),
        timeout=timeout,
        follow_redirects=env.get("WARCEMBED_FOLLOW_REDIRECTS", "1") == "1",
        embed_template=Path(template).expanduser() if template else None,
        log_level=env.get("WARCEMBED_LOG_LEVEL", "INFO").upper(),
    )
