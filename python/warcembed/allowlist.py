"""Static set of origin hostnames archives may be served from."""

from __future__ import annotations

import re
from pathlib import Path
from typing import FrozenSet, Iterable, Protocol, Union

_SEPARATORS = re.compile(r"[\s,]+")


class HostAllowlist(Protocol):
    def contains(self, host: str) -> bool: ...


class Allowlist:
    """Immutable, case-insensitive set of `host[:port]` entries."""

    def __init__(self, hosts: Iterable[str] = ()):
        self._hosts: FrozenSet[str] = frozenset(h.strip().lower() for h in hosts if h and h.strip())

    @classmethod
    def from_string(cls, value: str) -> "Allowlist":
        """Parse a comma- or whitespace-separated host list."""
        return cls(_SEPARATORS.split(value or ""))

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Allowlist":
        """Load one host per line; `#` starts a comment."""
        hosts = []
        for line in Path(path).read_text(encoding="utf-8").splitlines():
            line = line.split("#", 1)[0].strip()
            if line:
                hosts.append(line)
        return cls(hosts)

    def union(self, other: "Allowlist") -> "Allowlist":
        return Allowlist(self._hosts | other._hosts)

    def contains(self, host: str) -> bool:
        return bool(host) and host.lower() in self._hosts

    def __contains__(self, host: object) -> bool:
        return isinstance(host, str) and self.contains(host)

    def __iter__(self):
        return iter(sorted(self._hosts))

    def __len__(self) -> int:
        return len(self._hosts)

    def __repr__(self) -> str:
        return f"Allowlist({sorted(self._hosts)!r})"
