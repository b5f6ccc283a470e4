import pytest

from warcembed.allowlist import Allowlist
from warcembed.errors import InvalidReference, MethodNotAllowed
from warcembed.reference import ArchiveKind, parse_archive_url, validate_reference

ALLOW = Allowlist(["allowed.example", "localhost:8080", "[::1]:9000"])


def test_valid_wacz_reference():
    ref = validate_reference("get", "https://allowed.example/a/foo.wacz", ALLOW)
    assert ref.kind is ArchiveKind.WACZ
    assert ref.scheme == "https"
    assert ref.host == "allowed.example"
    assert ref.raw_url == "https://allowed.example/a/foo.wacz"


def test_valid_warc_gz_reference_with_query():
    ref = validate_reference("HEAD", "http://allowed.example/x.warc.gz?sig=1", ALLOW)
    assert ref.kind is ArchiveKind.WARC_GZ
    assert ref.kind.content_type == "application/x-gzip"


@pytest.mark.parametrize("method", ["POST", "PUT", "PATCH", "DELETE", "OPTIONS", ""])
def test_method_not_allowed(method):
    with pytest.raises(MethodNotAllowed):
        validate_reference(method, "https://allowed.example/foo.wacz", ALLOW)


@pytest.mark.parametrize(
    "url",
    [
        None,
        "",
        "not a url",
        "/relative/foo.wacz",
        "ftp://allowed.example/foo.wacz",
        "https://allowed.example/foo.zip",
        "https://allowed.example/foo.warc",
        "https://allowed.example/foo.WACZ",
        "https://allowed.example:99999/foo.wacz",
        "https://blocked.example/foo.wacz",
        "https://allowed.example.evil/foo.wacz",
        "https://allowed.example/a\x01b.wacz",
    ],
)
def test_invalid_reference(url):
    with pytest.raises(InvalidReference):
        validate_reference("GET", url, ALLOW)


def test_host_includes_non_default_port():
    assert validate_reference("GET", "http://localhost:8080/a.wacz", ALLOW).host == "localhost:8080"
    assert validate_reference("GET", "http://[::1]:9000/a.wacz", ALLOW).host == "[::1]:9000"
    with pytest.raises(InvalidReference):
        validate_reference("GET", "http://localhost/a.wacz", ALLOW)


def test_default_port_and_case_are_normalized():
    ref = validate_reference("GET", "HTTPS://Allowed.Example:443/foo.wacz", ALLOW)
    assert ref.host == "allowed.example"
    assert ref.scheme == "https"


def test_specialized_suffixes():
    only_wacz = (ArchiveKind.WACZ,)
    assert parse_archive_url("https://a.example/x.wacz", only_wacz).kind is ArchiveKind.WACZ
    with pytest.raises(InvalidReference):
        parse_archive_url("https://a.example/x.warc.gz", only_wacz)
    with pytest.raises(InvalidReference):
        parse_archive_url("https://a.example/x.wacz", (ArchiveKind.WARC_GZ,))
