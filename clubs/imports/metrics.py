"""
Prometheus Metrics — Caddyfile import observability.

Exposes counters and histograms for:
- Validator outcomes (accepted / low_confidence / rejected)
- Disqualifying error types (empty, html, json, script, low_score)
- Confidence score distribution
- Write-barrier blocks
- Per-stage latency

Usage
-----
    from clubs.imports.metrics import record_validation, timed_stage

    with timed_stage("validate"):
        result = validate_caddyfile(text)
    record_validation(result)
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator

from prometheus_client import Counter, Histogram

from clubs.config.constants import (
    MSG_EMPTY,
    MSG_HTML,
    MSG_JSON,
    MSG_SERVER_SCRIPT,
    VALID_CONFIDENCE,
)
from clubs.models.validation import CaddyfileValidationResult

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Metric definitions
# ---------------------------------------------------------------------------

# Validator verdicts.
VALIDATION_OUTCOMES: Counter = Counter(
    "clubs_caddyfile_validations_total",
    "Caddyfile validation verdicts",
    ["outcome"],
)

# Validation errors by type.
VALIDATION_ERRORS: Counter = Counter(
    "clubs_caddyfile_validation_errors_total",
    "Caddyfile validation errors by type",
    ["error_type"],
)

# Distribution of the heuristic confidence score (0-100).
CONFIDENCE_SCORE: Histogram = Histogram(
    "clubs_caddyfile_confidence_score",
    "Heuristic Caddyfile confidence score",
    buckets=(0, 10, 20, 30, 40, 50, 60, 70, 80, 90, 100),
)

# How many uploads the write barrier refused to persist.
BARRIER_BLOCKS: Counter = Counter(
    "clubs_upload_barrier_blocks_total",
    "Uploads blocked by the write barrier",
    ["source"],
)

# Processing latency per stage (seconds).
STAGE_LATENCY: Histogram = Histogram(
    "clubs_import_stage_seconds",
    "Processing time per import stage in seconds",
    ["stage"],
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0),
)

_ERROR_TYPES = {
    MSG_EMPTY: "empty",
    MSG_HTML: "html",
    MSG_JSON: "json",
    MSG_SERVER_SCRIPT: "script",
}


# ---------------------------------------------------------------------------
# Convenience helpers
# ---------------------------------------------------------------------------

def classify_error(message: str) -> str:
    """Map a validator error message to a low-cardinality label."""
    return _ERROR_TYPES.get(message, "low_score")


def outcome_label(result: CaddyfileValidationResult) -> str:
    if not result.is_valid:
        return "rejected"
    if result.confidence_score < VALID_CONFIDENCE:
        return "low_confidence"
    return "accepted"


def record_validation(result: CaddyfileValidationResult) -> None:
    """Record verdict, error types and confidence of one validation."""
    VALIDATION_OUTCOMES.labels(outcome=outcome_label(result)).inc()
    CONFIDENCE_SCORE.observe(result.confidence_score)
    for err in result.errors:
        VALIDATION_ERRORS.labels(error_type=classify_error(err)).inc()


def record_barrier_block(source: str) -> None:
    """Increment the write-barrier block counter for *source*."""
    BARRIER_BLOCKS.labels(source=source).inc()


@contextmanager
def timed_stage(stage: str) -> Generator[None, None, None]:
    """
    Context manager that records stage latency.

    Usage::

        with timed_stage("stats"):
            stats = compute_enhanced_stats(text)
    """
    with STAGE_LATENCY.labels(stage=stage).time():
        yield
