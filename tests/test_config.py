from pathlib import Path

import pytest

from warcembed.allowlist import Allowlist
from warcembed.config import DEFAULT_TIMEOUT, load_settings


def test_allowlist_lookup_is_case_insensitive():
    allow = Allowlist.from_string("Archive.Example, cdn.example:8443\nother.example")
    assert allow.contains("archive.example")
    assert "ARCHIVE.EXAMPLE" in allow
    assert allow.contains("cdn.example:8443")
    assert not allow.contains("cdn.example")
    assert not allow.contains("")
    assert len(allow) == 3


def test_allowlist_file_skips_comments(tmp_path):
    path = tmp_path / "allowlist.txt"
    path.write_text("# archive hosts\nwarcs.example  # primary\n\nbackup.example\n", encoding="utf-8")
    assert list(Allowlist.from_file(path)) == ["backup.example", "warcs.example"]


def test_load_settings_defaults():
    settings = load_settings({})
    assert len(settings.allowlist) == 0
    assert settings.timeout == DEFAULT_TIMEOUT
    assert settings.follow_redirects is True
    assert settings.embed_template is None
    assert settings.log_level == "INFO"


def test_load_settings_from_environment(tmp_path):
    hosts = tmp_path / "hosts.txt"
    hosts.write_text("file.example\n", encoding="utf-8")
    settings = load_settings(
        {
            "WARCEMBED_ALLOWLIST": "env.example",
            "WARCEMBED_ALLOWLIST_FILE": str(hosts),
            "WARCEMBED_TIMEOUT": "2.5",
            "WARCEMBED_FOLLOW_REDIRECTS": "0",
            "WARCEMBED_EMBED_TEMPLATE": str(tmp_path / "embed.html"),
            "WARCEMBED_LOG_LEVEL": "debug",
        }
    )
    assert settings.allowlist.contains("env.example")
    assert settings.allowlist.contains("file.example")
    assert settings.timeout == 2.5
    assert settings.follow_redirects is False
    assert settings.embed_template == Path(tmp_path / "embed.html")
    assert settings.log_level == "DEBUG"


def test_bad_timeout_is_reported():
    with pytest.raises(ValueError, match="WARCEMBED_TIMEOUT"):
        load_settings({"WARCEMBED_TIMEOUT": "soon"})
