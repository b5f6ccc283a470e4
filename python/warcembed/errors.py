"""Error kinds that terminate an archive request."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional


class ErrorKind(str, Enum):
    METHOD_NOT_ALLOWED = "method_not_allowed"
    INVALID_REFERENCE = "invalid_reference"
    ORIGIN_UNREACHABLE = "origin_unreachable"
    RANGE_NOT_SATISFIABLE = "range_not_satisfiable"


class ArchiveProxyError(Exception):
    """Base class for errors that map to an empty-body HTTP response.

    The message is for logs only; clients see the status code and headers.
    """

    kind: ErrorKind
    status_code: int = 500

    def __init__(self, message: str = "", headers: Optional[Dict[str, str]] = None):
        super().__init__(message or self.kind.value)
        self.headers: Dict[str, str] = dict(headers or {})


class MethodNotAllowed(ArchiveProxyError):
    kind = ErrorKind.METHOD_NOT_ALLOWED
    status_code = 405


class InvalidReference(ArchiveProxyError):
    kind = ErrorKind.INVALID_REFERENCE
    status_code = 400


class OriginUnreachable(ArchiveProxyError):
    kind = ErrorKind.ORIGIN_UNREACHABLE
    status_code = 404


class RangeNotSatisfiable(ArchiveProxyError):
    kind = ErrorKind.RANGE_NOT_SATISFIABLE
    status_code = 416

    def __init__(self, total_length: int, message: str = ""):
        super().__init__(
            message or f"range starts beyond {total_length} bytes",
            headers={"content-range": f"bytes */{total_length}"},
        )
        self.total_length = total_length
