from importlib import metadata

try:
    __version__ = metadata.version("warcembed")
except metadata.PackageNotFoundError:
    __version__ = "0.1.0"

from .allowlist import Allowlist
from .api import serve_archive
from .errors import (
    ArchiveProxyError,
    ErrorKind,
    InvalidReference,
    MethodNotAllowed,
    OriginUnreachable,
    RangeNotSatisfiable,
)
from .origin import OriginCapability, probe_origin
from .ranges import ByteRange, parse_range_header
from .reference import ArchiveKind, ArchiveReference, validate_reference
from .transfer import OutgoingResponse

__all__ = [
    "Allowlist",
    "serve_archive",
    "ArchiveProxyError",
    "ErrorKind",
    "InvalidReference",
    "MethodNotAllowed",
    "OriginUnreachable",
    "RangeNotSatisfiable",
    "OriginCapability",
    "probe_origin",
    "ByteRange",
    "parse_range_header",
    "ArchiveKind",
    "ArchiveReference",
    "validate_reference",
    "OutgoingResponse",
    "__version__",
]
