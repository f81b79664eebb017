"""
Typed Pydantic models for the Caddy admin API contracts.

Only the fields the dashboard consumes are modelled; everything else in
Caddy's responses is passed through untouched as plain dicts.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from clubs.caddy.health import HEALTH_LABELS, calculate_health_status, failure_rate as compute_failure_rate


class UpstreamStatus(BaseModel):
    """Health counters of one reverse_proxy upstream."""

    address: str = Field(..., min_length=1, description="Dial address, e.g. 'localhost:8080'.")
    num_requests: int = Field(0, ge=0, description="Requests currently in flight.")
    fails: int = Field(0, ge=0, description="Recent failed requests.")

    @property
    def failure_rate(self) -> float:
        """Failures as a percentage of requests."""
        return compute_failure_rate(self.num_requests, self.fails)

    @property
    def health_status(self) -> int:
        """0 offline, 1 unhealthy, 2 degraded, 3 healthy."""
        return calculate_health_status(self.num_requests, self.fails)

    @property
    def health_label(self) -> str:
        return HEALTH_LABELS[self.health_status]

    @property
    def hostname(self) -> str:
        """Host part of the dial address, e.g. "localhost" for "localhost:3000"."""
        return self.address.split(":", 1)[0] or self.address


class CaddyStatus(BaseModel):
    """Reachability of the Caddy admin endpoint."""

    available: bool
    running: bool
    url: str

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class AdaptedConfig(BaseModel):
    """
    Caddyfile adapted to JSON.

    When the adapted config holds exactly one HTTP server, ``server`` names it
    and ``config`` is that server's config. Otherwise ``server`` is None and
    ``config`` is the whole adapted document.
    """

    server: Optional[str] = None
    config: Dict[str, Any] = Field(default_factory=dict)
    warnings: list = Field(default_factory=list)
