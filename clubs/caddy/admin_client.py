"""
Caddy Admin API client — thin wrapper over Caddy's REST admin endpoint.

Endpoints used:
    GET  /config/                   current JSON config (or Caddyfile text)
    GET  /id/{id}                   config subtree tagged with "@id"
    POST /config/{path}             update one path
    POST /adapt                     Caddyfile → JSON, nothing applied
    POST /load                      atomically replace the running config
    GET  /reverse_proxy/upstreams   upstream health counters

Every non-2xx answer and every transport failure surfaces as
CaddyAdminError, except in is_available() / get_status() which report
reachability as data.
"""
from __future__ import annotations

import logging
import time
from typing import Any, List, Optional

import requests
from jsonschema import ValidationError, validate

from clubs.caddy.metrics import (
    record_api_call,
    update_caddy_availability,
    update_upstream_metrics,
)
from clubs.config.schemas import ADAPT_RESPONSE_SCHEMA, UPSTREAMS_RESPONSE_SCHEMA
from clubs.config.settings import CADDY_API_TIMEOUT_S, CADDY_API_URL
from clubs.models.caddy_io import AdaptedConfig, CaddyStatus, UpstreamStatus

logger = logging.getLogger(__name__)

CADDYFILE_CONTENT_TYPE = "text/caddyfile"
JSON_CONTENT_TYPE = "application/json"


class CaddyAdminError(Exception):
    """Raised when the Caddy admin API rejects a request or is unreachable."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: str = "") -> None:
        self.status_code = status_code
        self.details = details
        super().__init__(f"{message}: {details}" if details else message)


class CaddyAdminClient:
    """
    Client for one Caddy admin endpoint.

    Args:
        base_url: Admin API root, e.g. ``http://localhost:2019``.
        timeout: Per-request timeout in seconds.
        session: Optional requests.Session (or compatible) to reuse.
    """

    def __init__(
        self,
        base_url: str = CADDY_API_URL,
        timeout: float = CADDY_API_TIMEOUT_S,
        session: Any = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        endpoint: str,
        *,
        data: Optional[str] = None,
        json_body: Any = None,
        headers: Optional[dict] = None,
        label: Optional[str] = None,
    ) -> requests.Response:
        url = f"{self.base_url}{endpoint}"
        label = label or endpoint
        logger.debug("Caddy admin %s %s", method, url)
        start = time.monotonic()
        try:
            response = self.session.request(
                method,
                url,
                data=data.encode("utf-8") if data is not None else None,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            record_api_call(label, method, 0, time.monotonic() - start)
            raise CaddyAdminError(f"Caddy admin API unreachable at {self.base_url}", details=str(exc)) from exc

        record_api_call(label, method, response.status_code, time.monotonic() - start)
        return response

    @staticmethod
    def _raise_for_status(response: requests.Response, message: str) -> None:
        if not response.ok:
            raise CaddyAdminError(
                message,
                status_code=response.status_code,
                details=response.text or response.reason or "",
            )

    @staticmethod
    def _json(response: requests.Response, message: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            # requests.JSONDecodeError is a ValueError
            raise CaddyAdminError(message, status_code=response.status_code, details=str(e)) from e

    # ------------------------------------------------------------------
    # Reachability
    # ------------------------------------------------------------------

    def is_available(self) -> bool:
        """True when GET /config/ answers with a 2xx status."""
        try:
            response = self._request("GET", "/config/")
        except CaddyAdminError as exc:
            logger.debug("Caddy admin API not available: %s", exc)
            update_caddy_availability(False)
            return False
        update_caddy_availability(response.ok)
        return response.ok

    def get_status(self) -> CaddyStatus:
        available = self.is_available()
        running = False
        if available:
            try:
                running = self._request("GET", "/").ok
            except CaddyAdminError:
                running = False
        return CaddyStatus(available=available, running=running, url=self.base_url)

    # ------------------------------------------------------------------
    # Config reads
    # ------------------------------------------------------------------

    def get_config(self) -> dict:
        response = self._request("GET", "/config/", headers={"Accept": JSON_CONTENT_TYPE})
        self._raise_for_status(response, "Failed to fetch configuration")
        return self._json(response, "Unexpected configuration response") or {}

    def get_config_by_id(self, config_id: str) -> dict:
        response = self._request("GET", f"/id/{config_id}", label="/id/{id}")
        if response.status_code == 404:
            raise CaddyAdminError(
                "Configuration not found",
                status_code=404,
                details=f'No configuration found with @id "{config_id}"',
            )
        self._raise_for_status(response, "Failed to fetch configuration")
        return self._json(response, "Unexpected configuration response")

    def get_caddyfile(self) -> str:
        """Live config rendered as Caddyfile text."""
        response = self._request("GET", "/config/", headers={"Accept": CADDYFILE_CONTENT_TYPE})
        self._raise_for_status(response, "Failed to read Caddyfile from Caddy")
        return response.text

    # ------------------------------------------------------------------
    # Adapt / load
    # ------------------------------------------------------------------

    def adapt(self, caddyfile: str) -> AdaptedConfig:
        """
        Convert a Caddyfile to JSON without applying it.

        When the adapted config has exactly one HTTP server, only that
        server's config is returned (named in ``server``).
        """
        response = self._request(
            "POST",
            "/adapt",
            data=caddyfile,
            headers={"Content-Type": CADDYFILE_CONTENT_TYPE},
        )
        self._raise_for_status(response, "Failed to adapt Caddyfile")

        body = self._json(response, "Unexpected /adapt response")
        try:
            validate(instance=body, schema=ADAPT_RESPONSE_SCHEMA)
        except ValidationError as e:
            raise CaddyAdminError("Unexpected /adapt response", details=e.message) from e

        config = body.get("result", body)
        warnings = body.get("warnings", [])

        servers = config.get("apps", {}).get("http", {}).get("servers")
        if isinstance(servers, dict) and len(servers) == 1:
            name, server_config = next(iter(servers.items()))
            return AdaptedConfig(server=name, config=server_config, warnings=warnings)

        return AdaptedConfig(config=config, warnings=warnings)

    def load_caddyfile(self, caddyfile: str) -> None:
        """Replace the running config with *caddyfile* (atomic in Caddy)."""
        response = self._request(
            "POST",
            "/load",
            data=caddyfile,
            headers={"Content-Type": CADDYFILE_CONTENT_TYPE},
        )
        self._raise_for_status(response, "Failed to apply configuration")
        logger.info("Caddyfile loaded into Caddy at %s", self.base_url)

    def load_config(self, config: dict) -> None:
        response = self._request("POST", "/load", json_body=config)
        self._raise_for_status(response, "Failed to apply configuration")

    def update_config_path(self, path: str, value: Any) -> None:
        response = self._request(
            "POST",
            f"/config/{path.lstrip('/')}",
            json_body=value,
            label="/config/{path}",
        )
        self._raise_for_status(response, f"Failed to update config path '{path}'")

    # ------------------------------------------------------------------
    # Upstreams
    # ------------------------------------------------------------------

    def get_upstreams(self) -> List[UpstreamStatus]:
        response = self._request("GET", "/reverse_proxy/upstreams")
        self._raise_for_status(response, "Failed to fetch upstreams")

        body = self._json(response, "Unexpected upstreams response") or []
        try:
            validate(instance=body, schema=UPSTREAMS_RESPONSE_SCHEMA)
        except ValidationError as e:
            raise CaddyAdminError("Unexpected upstreams response", details=e.message) from e

        upstreams = [UpstreamStatus(**item) for item in body]
        update_upstream_metrics(upstreams)
        return upstreams
