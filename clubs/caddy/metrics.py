"""
Prometheus Metrics — Caddy admin API and upstream observability.

Exposes:
- Admin API call counts and latency (recorded by CaddyAdminClient)
- Admin API availability
- Per-upstream health level, in-flight requests, fails and failure rate
- Structural counts of the configured Caddyfile

Usage
-----
    from clubs.caddy.metrics import update_upstream_metrics

    update_upstream_metrics(client.get_upstreams())
"""
from __future__ import annotations

import logging
from typing import Iterable

from prometheus_client import Counter, Gauge, Histogram

from clubs.models.caddy_io import UpstreamStatus
from clubs.models.caddyfile_stats import CaddyfileStats

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Admin API
# ---------------------------------------------------------------------------

API_CALLS: Counter = Counter(
    "caddy_api_calls_total",
    "Total number of calls to the Caddy admin API",
    ["endpoint", "method", "status"],
)

API_DURATION: Histogram = Histogram(
    "caddy_api_duration_seconds",
    "Duration of Caddy admin API calls in seconds",
    ["endpoint", "method"],
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0),
)

# 1 = available, 0 = unavailable
API_AVAILABLE: Gauge = Gauge(
    "caddy_api_available",
    "Whether the Caddy admin API is available",
)

# ---------------------------------------------------------------------------
# Upstreams
# ---------------------------------------------------------------------------

UPSTREAM_HEALTH: Gauge = Gauge(
    "caddy_upstream_health_status",
    "Health of reverse_proxy upstreams (0=offline, 1=unhealthy, 2=degraded, 3=healthy)",
    ["address", "hostname"],
)

UPSTREAM_REQUESTS: Gauge = Gauge(
    "caddy_upstream_requests",
    "Requests currently handled by the upstream",
    ["address", "hostname"],
)

UPSTREAM_FAILS: Gauge = Gauge(
    "caddy_upstream_fails",
    "Recent failures of the upstream",
    ["address", "hostname"],
)

UPSTREAM_FAILURE_RATE: Gauge = Gauge(
    "caddy_upstream_failure_rate",
    "Failure rate of the upstream as a percentage (0-100)",
    ["address", "hostname"],
)

_UPSTREAM_GAUGES = (UPSTREAM_HEALTH, UPSTREAM_REQUESTS, UPSTREAM_FAILS, UPSTREAM_FAILURE_RATE)

# ---------------------------------------------------------------------------
# Caddyfile
# ---------------------------------------------------------------------------

CADDYFILE_SITE_BLOCKS: Gauge = Gauge(
    "caddyfile_site_blocks",
    "Number of site blocks in the Caddyfile",
)

CADDYFILE_DIRECTIVES: Gauge = Gauge(
    "caddyfile_directives",
    "Number of directives in the Caddyfile",
)

CADDYFILE_SERVICES: Gauge = Gauge(
    "caddyfile_services",
    "Number of services routed by named host matchers in the Caddyfile",
)


# ---------------------------------------------------------------------------
# Convenience helpers
# ---------------------------------------------------------------------------

def record_api_call(endpoint: str, method: str, status: int, duration_s: float) -> None:
    """Count one admin API call; *status* is 0 when no response arrived."""
    API_CALLS.labels(endpoint=endpoint, method=method, status=str(status)).inc()
    API_DURATION.labels(endpoint=endpoint, method=method).observe(duration_s)


def update_caddy_availability(available: bool) -> None:
    API_AVAILABLE.set(1 if available else 0)


def update_upstream_metrics(upstreams: Iterable[UpstreamStatus]) -> None:
    """
    Replace all upstream gauges with *upstreams*.

    Upstreams that disappeared since the last call are dropped.
    """
    for gauge in _UPSTREAM_GAUGES:
        gauge.clear()

    count = 0
    for upstream in upstreams:
        labels = {"address": upstream.address, "hostname": upstream.hostname}
        UPSTREAM_HEALTH.labels(**labels).set(upstream.health_status)
        UPSTREAM_REQUESTS.labels(**labels).set(upstream.num_requests)
        UPSTREAM_FAILS.labels(**labels).set(upstream.fails)
        UPSTREAM_FAILURE_RATE.labels(**labels).set(upstream.failure_rate)
        count += 1

    logger.debug("Upstream metrics updated for %d upstream(s)", count)


def update_caddyfile_stats(stats: CaddyfileStats) -> None:
    """Set the Caddyfile gauges; the services gauge only when counted."""
    CADDYFILE_SITE_BLOCKS.set(stats.site_block_count)
    CADDYFILE_DIRECTIVES.set(stats.directive_count)
    if stats.service_count is not None:
        CADDYFILE_SERVICES.set(stats.service_count)
