"""
Unit tests for the import pipeline (analyze / import / read / apply).
"""
import pytest
import requests
from prometheus_client import REGISTRY

from clubs.caddy.admin_client import CaddyAdminError
from clubs.config.constants import MSG_HTML
from clubs.imports.pipeline import (
    CaddyfileRejectedError,
    analyze_caddyfile,
    apply_caddyfile,
    apply_content,
    import_caddyfile,
    read_caddyfile,
)


class TestAnalyzeCaddyfile:

    def test_report_shape(self, full_caddyfile):
        report = analyze_caddyfile(full_caddyfile, source="paste")

        assert report["source"] == "paste"
        assert report["accepted"] is True
        assert report["validation"]["confidence"] == 100
        assert report["stats"] == {"siteBlocks": 1, "directives": 7}
        assert report["diagnostics"] == {"warnings": [], "errors": []}
        assert report["processing_metadata"]["line_count"] == 14
        assert report["processing_metadata"]["duration_ms"] >= 0

    def test_rejected_still_has_stats(self, html_document):
        report = analyze_caddyfile(html_document)
        assert report["accepted"] is False
        assert report["diagnostics"]["errors"] == [MSG_HTML]
        assert "siteBlocks" in report["stats"]

    def test_wildcard_reports_services(self, wildcard_caddyfile):
        report = analyze_caddyfile(wildcard_caddyfile)
        assert report["stats"] == {"siteBlocks": 1, "directives": 3, "services": 2}

    def test_empty_content(self):
        report = analyze_caddyfile("")
        assert report["accepted"] is False
        assert report["processing_metadata"]["line_count"] == 0


class TestImportCaddyfile:

    def test_accepted(self, simple_caddyfile):
        report = import_caddyfile(simple_caddyfile)
        assert report["accepted"] is True

    def test_rejected_raises(self, html_document):
        with pytest.raises(CaddyfileRejectedError) as exc_info:
            import_caddyfile(html_document)
        assert exc_info.value.errors == [MSG_HTML]
        assert "Invalid Caddyfile" in str(exc_info.value)

    def test_rejection_is_a_value_error(self):
        with pytest.raises(ValueError):
            import_caddyfile("")


class TestReadCaddyfile:

    def test_reads_file(self, tmp_path, simple_caddyfile):
        path = tmp_path / "Caddyfile"
        path.write_text(simple_caddyfile, encoding="utf-8")
        assert read_caddyfile(path) == simple_caddyfile

    def test_missing_without_client(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_caddyfile(tmp_path / "missing")

    def test_missing_falls_back_to_live_config(self, tmp_path, admin_client, fake_session, make_response):
        fake_session.add("GET", "/config/", make_response(200, text="live.example.com {\n}\n"))
        assert read_caddyfile(tmp_path / "missing", admin_client) == "live.example.com {\n}\n"

    def test_missing_with_unreachable_caddy(self, tmp_path, admin_client, fake_session):
        fake_session.add("GET", "/config/", requests.ConnectionError("refused"))
        with pytest.raises(FileNotFoundError):
            read_caddyfile(tmp_path / "missing", admin_client)


class TestApplyCaddyfile:

    def test_applies_accepted_file(self, tmp_path, full_caddyfile, admin_client, fake_session, make_response):
        path = tmp_path / "Caddyfile"
        path.write_text(full_caddyfile, encoding="utf-8")
        fake_session.add("POST", "/load", make_response(200, text=""))

        report = apply_caddyfile(path, admin_client)

        assert report["applied"] is True
        assert report["source"] == "file"
        assert fake_session.calls[-1]["data"] == full_caddyfile.encode("utf-8")

    def test_rejected_file_never_sent(self, tmp_path, html_document, admin_client, fake_session):
        path = tmp_path / "Caddyfile"
        path.write_text(html_document, encoding="utf-8")

        with pytest.raises(CaddyfileRejectedError):
            apply_caddyfile(path, admin_client)
        assert fake_session.calls == []

    def test_caddy_refusal_propagates(self, tmp_path, full_caddyfile, admin_client, fake_session, make_response):
        path = tmp_path / "Caddyfile"
        path.write_text(full_caddyfile, encoding="utf-8")
        fake_session.add("POST", "/load", make_response(400, text="adapting config: bad"))

        with pytest.raises(CaddyAdminError):
            apply_caddyfile(path, admin_client)


class TestApplyContent:

    def test_reuses_existing_report(self, full_caddyfile, admin_client, fake_session, make_response):
        fake_session.add("POST", "/load", make_response(200, text=""))
        report = analyze_caddyfile(full_caddyfile, source="file")
        before = REGISTRY.get_sample_value("clubs_caddyfile_validations_total", {"outcome": "accepted"})

        applied = apply_content(full_caddyfile, admin_client, report)

        after = REGISTRY.get_sample_value("clubs_caddyfile_validations_total", {"outcome": "accepted"})
        assert after == before
        assert applied["applied"] is True
        assert "applied" not in report

    def test_rejected_report_never_sent(self, html_document, admin_client, fake_session):
        report = analyze_caddyfile(html_document)

        with pytest.raises(CaddyfileRejectedError) as exc_info:
            apply_content(html_document, admin_client, report)

        assert exc_info.value.errors == [MSG_HTML]
        assert fake_session.calls == []

    def test_validates_without_report(self, html_document, admin_client, fake_session):
        with pytest.raises(CaddyfileRejectedError):
            apply_content(html_document, admin_client)
        assert fake_session.calls == []
