"""
Import Pipeline — gate uploaded Caddyfiles before they reach disk or Caddy.

Stages:
    1. Validate (heuristic confidence score)
    2. Stats (enhanced: services when the wildcard layout is detected)
    3. Report assembly (+ metrics)

The validator is the gate; stats are computed regardless of its verdict so
the caller can always show counts next to the errors.
"""
import logging
import time
from pathlib import Path
from typing import List, Optional

from clubs.caddy.admin_client import CaddyAdminClient
from clubs.caddyfile.services import compute_enhanced_stats
from clubs.caddyfile.validator import validate_caddyfile
from clubs.imports.metrics import record_validation, timed_stage

logger = logging.getLogger(__name__)


class CaddyfileRejectedError(ValueError):
    """Raised when the validator refuses a Caddyfile."""

    def __init__(self, errors: List[str], warnings: Optional[List[str]] = None) -> None:
        self.errors = list(errors)
        self.warnings = list(warnings or [])
        super().__init__(f"Invalid Caddyfile: {', '.join(self.errors)}")


def analyze_caddyfile(content: str, source: str = "upload") -> dict:
    """
    Validate and count a Caddyfile. Never raises.

    Args:
        content: Raw Caddyfile text.
        source: Where the text came from ("upload", "paste", "file", ...).

    Returns:
        {
            "source": str,
            "accepted": bool,
            "validation": {...},
            "stats": {...},
            "diagnostics": {"warnings": [...], "errors": [...]},
            "processing_metadata": {"duration_ms": int, "line_count": int},
        }
    """
    start_time = time.monotonic()

    with timed_stage("validate"):
        validation = validate_caddyfile(content)
    record_validation(validation)

    with timed_stage("stats"):
        stats = compute_enhanced_stats(content or "")

    elapsed_ms = int((time.monotonic() - start_time) * 1000)

    if validation.is_valid:
        logger.info(
            "Caddyfile from %s accepted (confidence=%d%%, warnings=%d)",
            source, validation.confidence_score, len(validation.warnings),
        )
    else:
        logger.warning("Caddyfile from %s rejected: %s", source, validation.errors)

    return {
        "source": source,
        "accepted": validation.is_valid,
        "validation": validation.to_dict(),
        "stats": stats.to_dict(),
        "diagnostics": {
            "warnings": list(validation.warnings),
            "errors": list(validation.errors),
        },
        "processing_metadata": {
            "duration_ms": elapsed_ms,
            "line_count": len(content.split("\n")) if content else 0,
        },
    }


def import_caddyfile(content: str, source: str = "upload") -> dict:
    """
    Same report as analyze_caddyfile(), but rejection is an exception.

    Raises:
        CaddyfileRejectedError: the validator did not accept *content*.
    """
    report = analyze_caddyfile(content, source=source)
    if not report["accepted"]:
        raise CaddyfileRejectedError(
            report["diagnostics"]["errors"],
            report["diagnostics"]["warnings"],
        )
    return report


def read_caddyfile(path: str | Path, client: Optional[CaddyAdminClient] = None) -> str:
    """
    Read the Caddyfile from *path*, or from the live Caddy if it is missing.

    Raises:
        FileNotFoundError: no file and no reachable Caddy to read from.
    """
    path = Path(path)
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        if client is None or not client.is_available():
            raise
        logger.info("Caddyfile %s not found, reading live config from %s", path, client.base_url)
        return client.get_caddyfile()


def apply_caddyfile(path: str | Path, client: CaddyAdminClient) -> dict:
    """
    Validate the Caddyfile at *path* and load it into Caddy.

    Raises:
        FileNotFoundError: *path* does not exist.
        CaddyfileRejectedError: heuristic validation failed; nothing sent.
        CaddyAdminError: Caddy refused the configuration.
    """
    content = Path(path).read_text(encoding="utf-8")
    return apply_content(content, client)


def apply_content(content: str, client: CaddyAdminClient, report: Optional[dict] = None) -> dict:
    """
    Load already-read Caddyfile text into Caddy.

    *report* is a previous analyze_caddyfile() result for the same text; when
    given, the text is not validated a second time.

    Raises:
        CaddyfileRejectedError: the text (or *report*) was not accepted.
        CaddyAdminError: Caddy refused the configuration.
    """
    if report is None:
        report = import_caddyfile(content, source="file")
    elif not report["accepted"]:
        raise CaddyfileRejectedError(
            report["diagnostics"]["errors"],
            report["diagnostics"]["warnings"],
        )

    with timed_stage("apply"):
        client.load_caddyfile(content)

    return {**report, "applied": True}
