"""
Upstream health classification from Caddy's reverse_proxy counters.

Levels: 0 offline, 1 unhealthy, 2 degraded, 3 healthy.
"""
from clubs.config.constants import (
    DEGRADED_FAILURE_RATE,
    HEALTH_DEGRADED,
    HEALTH_HEALTHY,
    HEALTH_OFFLINE,
    HEALTH_UNHEALTHY,
    UNHEALTHY_FAILS,
    UNHEALTHY_FAILURE_RATE,
)

HEALTH_LABELS = {
    HEALTH_OFFLINE: "offline",
    HEALTH_UNHEALTHY: "unhealthy",
    HEALTH_DEGRADED: "degraded",
    HEALTH_HEALTHY: "healthy",
}


def failure_rate(num_requests: int, fails: int) -> float:
    """Failures as a percentage of requests (0 when there were no requests)."""
    if num_requests <= 0:
        return 0.0
    return fails / num_requests * 100


def calculate_health_status(num_requests: int, fails: int) -> int:
    """
    Classify one upstream.

    No traffic and no failures means offline. Above 10% failures or more
    than 20 failures is unhealthy, above 1% is degraded.
    """
    if num_requests == 0 and fails == 0:
        return HEALTH_OFFLINE

    rate = failure_rate(num_requests, fails)
    if rate > UNHEALTHY_FAILURE_RATE or fails > UNHEALTHY_FAILS:
        return HEALTH_UNHEALTHY
    if rate > DEGRADED_FAILURE_RATE:
        return HEALTH_DEGRADED
    return HEALTH_HEALTHY
