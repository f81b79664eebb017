"""
Upload Write Barrier — persist uploads to Redis with validation gating.

Every upload is stored RAW (exactly as received) for audit. The ACCEPTED
Caddyfile and its report are written only after the validator passes, so
downstream readers (editor, apply) never see rejected text.

Key scheme
----------
  upload:{upload_id}:caddyfile:raw       – text as uploaded
  upload:{upload_id}:caddyfile:accepted  – text that passed validation
  upload:{upload_id}:caddyfile:report    – JSON import report
  upload:{upload_id}:caddyfile:error     – JSON error record (rejections)
"""
from __future__ import annotations

import json
import logging
from typing import Any, Optional

import redis

from clubs.config.settings import REDIS_URL, UPLOAD_TTL_SECONDS
from clubs.imports.metrics import record_barrier_block
from clubs.imports.pipeline import CaddyfileRejectedError, analyze_caddyfile

logger = logging.getLogger(__name__)


def _key_prefix(upload_id: str) -> str:
    return f"upload:{_safe_id(upload_id)}:caddyfile"


def _safe_id(upload_id: str) -> str:
    """Strip/replace characters that are unsafe in Redis key names."""
    return (
        upload_id
        .replace("<", "")
        .replace(">", "")
        .replace(" ", "_")
        .replace("/", "_")
        .replace(":", "_")
    )


def _persist(redis_client: Any, key: str, value: str, ttl: int, what: str) -> None:
    try:
        redis_client.set(key, value, ex=ttl)
        logger.debug("UploadBarrier %s persisted → %s", what, key)
    except Exception as exc:  # noqa: BLE001
        logger.warning("UploadBarrier failed to persist %s (%s): %s", what, key, exc)


# ---------------------------------------------------------------------------
# Core write barrier
# ---------------------------------------------------------------------------

def import_with_barrier(
    *,
    raw_text: str,
    redis_client: Any,
    upload_id: str,
    source: str = "upload",
    ttl: int = UPLOAD_TTL_SECONDS,
) -> dict:
    """
    Validate an uploaded Caddyfile behind a Redis write barrier.

    Flow
    ----
    1. Persist *raw_text* (``…:raw``), even if it will be rejected.
    2. Analyze (validate + stats).
       * On rejection: persist error record, raise CaddyfileRejectedError.
    3. Persist accepted text (``…:accepted``) and report (``…:report``).
    4. Return the report.

    Args:
        raw_text:     Uploaded text.
        redis_client: A redis.Redis (or compatible) instance.
        upload_id:    Unique upload identifier.
        source:       Origin label used in the report and metrics.
        ttl:          Key expiry in seconds.

    Raises:
        CaddyfileRejectedError: validation failed; nothing but raw/error stored.
    """
    prefix = _key_prefix(upload_id)

    _persist(redis_client, f"{prefix}:raw", raw_text, ttl, "raw upload")

    report = analyze_caddyfile(raw_text, source=source)

    if not report["accepted"]:
        error_payload = {
            "upload_id": upload_id,
            "source": source,
            "errors": report["diagnostics"]["errors"],
            "warnings": report["diagnostics"]["warnings"],
        }
        _persist(redis_client, f"{prefix}:error", json.dumps(error_payload), ttl, "error record")
        record_barrier_block(source)
        logger.error(
            "UploadBarrier[%s] validation FAILED — blocking persistence. errors=%s",
            upload_id, report["diagnostics"]["errors"],
        )
        raise CaddyfileRejectedError(
            report["diagnostics"]["errors"],
            report["diagnostics"]["warnings"],
        )

    _persist(redis_client, f"{prefix}:accepted", raw_text, ttl, "accepted Caddyfile")
    _persist(redis_client, f"{prefix}:report", json.dumps(report), ttl, "report")

    logger.info(
        "UploadBarrier[%s] completed OK (warnings=%d)",
        upload_id, len(report["diagnostics"]["warnings"]),
    )
    return report


# ---------------------------------------------------------------------------
# Readers
# ---------------------------------------------------------------------------

def get_raw_upload(redis_client: Any, upload_id: str) -> Optional[str]:
    """Raw text of an upload, or None if not found."""
    return redis_client.get(f"{_key_prefix(upload_id)}:raw")


def get_accepted_upload(redis_client: Any, upload_id: str) -> Optional[str]:
    """Accepted Caddyfile text, or None if the upload was rejected or expired."""
    return redis_client.get(f"{_key_prefix(upload_id)}:accepted")


def get_upload_report(redis_client: Any, upload_id: str) -> Optional[dict]:
    data = redis_client.get(f"{_key_prefix(upload_id)}:report")
    return json.loads(data) if data else None


def get_upload_error(redis_client: Any, upload_id: str) -> Optional[dict]:
    data = redis_client.get(f"{_key_prefix(upload_id)}:error")
    return json.loads(data) if data else None


def build_redis_client(url: Optional[str] = None) -> Any:
    """
    Build and return a redis.Redis client.

    Falls back to REDIS_URL from settings if *url* is not provided.
    """
    target_url = url or REDIS_URL
    client = redis.Redis.from_url(target_url, decode_responses=True)
    logger.debug("Redis client created for URL: %s", target_url)
    return client


# ---------------------------------------------------------------------------
# Null / no-op client (for local use without a Redis server)
# ---------------------------------------------------------------------------

class NullRedisClient:
    """
    Drop-in replacement that discards all writes and returns None on reads.
    """

    def set(self, key: str, value: str, **kwargs: Any) -> None:  # noqa: ARG002
        pass

    def get(self, key: str) -> None:  # noqa: ARG002
        return None

    def exists(self, *keys: str) -> int:
        return 0

    def delete(self, *keys: str) -> int:
        return 0
