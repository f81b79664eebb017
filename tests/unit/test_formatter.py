"""
Unit tests for format_caddyfile().
The caddy binary is never invoked: subprocess.run is monkeypatched.
"""
import os
import subprocess

import pytest

from clubs.caddy.admin_client import CaddyAdminError
from clubs.caddyfile import formatter
from clubs.caddyfile.formatter import format_caddyfile

UNFORMATTED = "example.com {\nreverse_proxy localhost:8080\n}\n"
FORMATTED = "example.com {\n\treverse_proxy localhost:8080\n}\n"


@pytest.fixture
def fake_fmt(monkeypatch):
    """Replace subprocess.run with a fake ``caddy fmt --overwrite``."""
    seen = {}

    def _run(cmd, **kwargs):
        seen["cmd"] = cmd
        seen["kwargs"] = kwargs
        path = cmd[-1]
        with open(path, "w", encoding="utf-8") as f:
            f.write(FORMATTED)
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    monkeypatch.setattr(formatter.subprocess, "run", _run)
    return seen


@pytest.fixture
def missing_caddy(monkeypatch):
    def _run(cmd, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", cmd[0])

    monkeypatch.setattr(formatter.subprocess, "run", _run)


class TestCaddyFmt:

    def test_formats_content(self, fake_fmt):
        result = format_caddyfile(UNFORMATTED, caddy_bin="caddy")
        assert result == {"formatted": True, "content": FORMATTED}

    def test_invokes_fmt_overwrite(self, fake_fmt):
        format_caddyfile(UNFORMATTED, caddy_bin="/usr/bin/caddy")
        assert fake_fmt["cmd"][:3] == ["/usr/bin/caddy", "fmt", "--overwrite"]
        assert fake_fmt["kwargs"]["check"] is True

    def test_temp_file_removed(self, fake_fmt):
        format_caddyfile(UNFORMATTED)
        assert not os.path.exists(fake_fmt["cmd"][-1])

    def test_temp_file_removed_on_failure(self, monkeypatch):
        seen = {}

        def _run(cmd, **kwargs):
            seen["path"] = cmd[-1]
            raise subprocess.CalledProcessError(1, cmd, stderr="parse error")

        monkeypatch.setattr(formatter.subprocess, "run", _run)
        with pytest.raises(subprocess.CalledProcessError):
            format_caddyfile(UNFORMATTED)
        assert not os.path.exists(seen["path"])


class TestFallback:

    def test_missing_binary_without_client_raises(self, missing_caddy):
        with pytest.raises(FileNotFoundError):
            format_caddyfile(UNFORMATTED)

    def test_fallback_adapt_ok(self, missing_caddy, admin_client, fake_session, make_response):
        fake_session.add("POST", "/adapt", make_response(200, {"result": {"apps": {}}}))

        result = format_caddyfile(UNFORMATTED, client=admin_client)

        assert result["formatted"] is False
        assert result["content"] == UNFORMATTED
        assert result["warning"] == "Caddy fmt not available - returning unformatted content"
        assert fake_session.calls[0]["path"] == "/adapt"

    def test_fallback_adapt_rejects(self, missing_caddy, admin_client, fake_session, make_response):
        fake_session.add("POST", "/adapt", make_response(400, text="Caddyfile:2 - unknown directive"))

        with pytest.raises(CaddyAdminError) as exc_info:
            format_caddyfile(UNFORMATTED, client=admin_client)

        assert str(exc_info.value).startswith("Invalid Caddyfile")
        assert exc_info.value.status_code == 400
        assert "unknown directive" in exc_info.value.details

    def test_fmt_timeout_falls_back(self, monkeypatch, admin_client, fake_session, make_response):
        def _run(cmd, **kwargs):
            raise subprocess.TimeoutExpired(cmd, kwargs.get("timeout"))

        monkeypatch.setattr(formatter.subprocess, "run", _run)
        fake_session.add("POST", "/adapt", make_response(200, {"result": {}}))

        result = format_caddyfile(UNFORMATTED, client=admin_client)
        assert result["formatted"] is False
