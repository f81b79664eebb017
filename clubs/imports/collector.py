"""
Metrics collection — refresh the Caddy gauges and render the registry.

One pass:
    1. Probe the admin API (availability gauge)
    2. If reachable, fetch upstreams (upstream gauges)
    3. Count the configured Caddyfile (Caddyfile gauges)
    4. Render everything in the Prometheus text format
"""
import logging
from pathlib import Path

from prometheus_client import REGISTRY, generate_latest

from clubs.caddy.admin_client import CaddyAdminClient, CaddyAdminError
from clubs.caddy.metrics import update_caddyfile_stats
from clubs.caddyfile.services import compute_enhanced_stats
from clubs.config.settings import CADDYFILE_PATH
from clubs.imports.pipeline import read_caddyfile

logger = logging.getLogger(__name__)


def refresh_metrics(client: CaddyAdminClient, caddyfile_path: str | Path = CADDYFILE_PATH) -> None:
    """
    Update availability, upstream and Caddyfile gauges.

    Failures of one source are logged and do not stop the others.
    """
    available = client.is_available()

    if available:
        try:
            client.get_upstreams()
        except CaddyAdminError as exc:
            logger.error("Failed to fetch upstream metrics: %s", exc)

    try:
        content = read_caddyfile(caddyfile_path, client if available else None)
    except (OSError, CaddyAdminError) as exc:
        logger.error("Failed to read Caddyfile for metrics: %s", exc)
        return

    update_caddyfile_stats(compute_enhanced_stats(content))


def collect_metrics(client: CaddyAdminClient, caddyfile_path: str | Path = CADDYFILE_PATH) -> str:
    """Refresh all gauges and return the registry in Prometheus text format."""
    refresh_metrics(client, caddyfile_path)
    return generate_latest(REGISTRY).decode("utf-8")
