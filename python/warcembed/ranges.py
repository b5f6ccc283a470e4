"""Single-range `Range` header parsing for the polyfill path."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from .errors import RangeNotSatisfiable

_DIGITS = re.compile(r"\d+")


@dataclass(frozen=True)
class ByteRange:
    """Inclusive byte interval within an object."""

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    def content_range(self, total_length: int) -> str:
        return f"bytes {self.start}-{self.end}/{total_length}"

    def slice(self, data: bytes) -> bytes:
        return data[self.start : self.end + 1]


def whole_object(total_length: int) -> ByteRange:
    if total_length <= 0:
        raise ValueError("an empty object has no byte range")
    return ByteRange(0, total_length - 1)


def parse_range_header(value: Optional[str], total_length: int) -> ByteRange:
    """Resolve `bytes=<start>-<end>` against `total_length`.

    Anything that is not a single range with a numeric start (missing header,
    other units, multiple ranges, suffix ranges, ``end < start``) yields the
    whole object. A missing, non-numeric or oversized end is clamped to the
    last byte. A start at or past the end of the object is unsatisfiable.
    """
    default = whole_object(total_length)
    if not value:
        return default

    unit, sep, ranges = value.strip().partition("=")
    if not sep or unit.strip().lower() != "bytes" or "," in ranges:
        return default

    start_s, sep, end_s = ranges.strip().partition("-")
    if not sep or not _DIGITS.fullmatch(start_s.strip()):
        return default
    start = int(start_s)

    end_s = end_s.strip()
    end = int(end_s) if _DIGITS.fullmatch(end_s) else total_length - 1
    end = min(end, total_length - 1)

    if start >= total_length:
        raise RangeNotSatisfiable(total_length)
    if end < start:
        return default
    return ByteRange(start, end)
