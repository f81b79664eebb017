"""
Caddyfile Formatter — delegates to ``caddy fmt``.

When the caddy binary is missing or fails, the text is returned unchanged
after a syntax check through the admin API's /adapt endpoint.
"""
import logging
import os
import subprocess
import tempfile
from typing import Optional

from clubs.caddy.admin_client import CaddyAdminClient, CaddyAdminError
from clubs.config.settings import CADDY_BIN

logger = logging.getLogger(__name__)

FMT_TIMEOUT_S: float = 10.0


def _run_caddy_fmt(content: str, caddy_bin: str) -> str:
    fd, tmp_path = tempfile.mkstemp(prefix="caddyfile-", suffix=".caddyfile")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)

        completed = subprocess.run(
            [caddy_bin, "fmt", "--overwrite", tmp_path],
            capture_output=True,
            text=True,
            timeout=FMT_TIMEOUT_S,
            check=True,
        )
        if completed.stderr and "formatted" not in completed.stderr.lower():
            logger.warning("caddy fmt warning: %s", completed.stderr.strip())

        with open(tmp_path, encoding="utf-8") as f:
            return f.read()
    finally:
        os.unlink(tmp_path)


def format_caddyfile(
    content: str,
    client: Optional[CaddyAdminClient] = None,
    caddy_bin: str = CADDY_BIN,
) -> dict:
    """
    Format *content* with ``caddy fmt``.

    Args:
        content: Caddyfile text.
        client: Admin client used for the /adapt fallback check.
        caddy_bin: Path or name of the caddy executable.

    Returns:
        {"formatted": True, "content": str} on success, or
        {"formatted": False, "content": content, "warning": str} when only
        the fallback syntax check ran.

    Raises:
        CaddyAdminError: fallback check rejected the Caddyfile.
        OSError / subprocess.SubprocessError: caddy fmt failed and no client
            was given.
    """
    try:
        formatted = _run_caddy_fmt(content, caddy_bin)
        return {"formatted": True, "content": formatted}
    except (OSError, subprocess.SubprocessError) as exc:
        if client is None:
            raise
        logger.warning("caddy fmt not available, falling back to validation only: %s", exc)

    try:
        client.adapt(content)
    except CaddyAdminError as exc:
        raise CaddyAdminError(
            "Invalid Caddyfile",
            status_code=exc.status_code,
            details=exc.details or "Caddy could not parse the configuration",
        ) from exc

    return {
        "formatted": False,
        "content": content,
        "warning": "Caddy fmt not available - returning unformatted content",
    }
