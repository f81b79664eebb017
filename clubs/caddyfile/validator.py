"""
Caddyfile Validator — heuristic "is this a Caddyfile?" check.

Used as a gate for uploaded or pasted text before it is written to disk or
sent to Caddy. It is not a parser: every line is scored on its own.

Stages:
    1. Empty input                      → disqualified
    2. HTML sniff                       → disqualified
    3. JSON sniff (must actually parse) → disqualified
    4. Line scoring
        - known directive       +15
        - site address          +10
        - bare brace            +5
        - PHP open tag          → disqualified
        - JavaScript tokens     -20 and a warning
    5. Clamp to [0, 100] and bucket:
        >= 50 valid, >= 30 valid with warning, < 30 invalid
"""
import json
import re
from typing import List

import numpy as np

from clubs.config.constants import (
    BRACE_WEIGHT,
    CLIENT_SCRIPT_MARKERS,
    COMMENT_PREFIX,
    COMMON_DIRECTIVES,
    DIRECTIVE_WEIGHT,
    HTML_MARKERS,
    LOW_CONFIDENCE,
    MAX_CONFIDENCE,
    MIN_CONFIDENCE,
    MSG_CLIENT_SCRIPT,
    MSG_EMPTY,
    MSG_HTML,
    MSG_JSON,
    MSG_LOW_CONFIDENCE,
    MSG_NO_DIRECTIVES,
    MSG_NOT_CADDYFILE,
    MSG_SERVER_SCRIPT,
    SCRIPT_PENALTY,
    SERVER_SCRIPT_MARKERS,
    SITE_ADDRESS_WEIGHT,
    VALID_CONFIDENCE,
)
from clubs.models.validation import CaddyfileValidationResult

DIRECTIVE_PATTERN = re.compile(
    r"(?:%s)\b" % "|".join(COMMON_DIRECTIVES),
    re.IGNORECASE,
)
PORT_ADDRESS_PATTERN = re.compile(r":[0-9]{1,5}(?:\s|\{|$)")
LOCALHOST_ADDRESS_PATTERN = re.compile(r"localhost(?::[0-9]+)?(?:\s|\{|$)")

_HOST_CHARS = frozenset("abcdefghijklmnopqrstuvwxyz0123456789.-")


# ======================================================================
# Line classifiers
# ======================================================================

def _is_hostname_address(line: str) -> bool:
    """
    Dotted hostname at line start, followed by whitespace, '{' or end.

    Equivalent to ``^[a-z0-9.-]+\\.[a-z]{2,}(\\s|{|$)`` (case-insensitive),
    checked on the leading host token so the cost stays linear.
    """
    end = 0
    lowered = line.lower()
    while end < len(lowered) and lowered[end] in _HOST_CHARS:
        end += 1

    if end < len(lowered) and not (lowered[end].isspace() or lowered[end] == "{"):
        return False

    head, dot, tld = lowered[:end].rpartition(".")
    return bool(dot) and bool(head) and len(tld) >= 2 and tld.isalpha()


def _is_site_address(line: str) -> bool:
    return (
        _is_hostname_address(line)
        or PORT_ADDRESS_PATTERN.match(line) is not None
        or LOCALHOST_ADDRESS_PATTERN.match(line) is not None
    )


def _reject_constant(name: str) -> None:
    # NaN / Infinity / -Infinity are Python extensions, not JSON
    raise ValueError(f"non-standard JSON constant {name}")


def _looks_like_json(content: str) -> bool:
    trimmed = content.strip()
    bracketed = (
        (trimmed.startswith("{") and trimmed.endswith("}"))
        or (trimmed.startswith("[") and trimmed.endswith("]"))
    )
    if not bracketed:
        return False
    try:
        json.loads(trimmed, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        # Not valid JSON: braces alone are fine in a Caddyfile
        return False
    return True


def _disqualified(error: str, warnings: List[str] | None = None) -> CaddyfileValidationResult:
    return CaddyfileValidationResult(
        is_valid=False,
        confidence_score=MIN_CONFIDENCE,
        warnings=tuple(warnings or ()),
        errors=(error,),
    )


# ======================================================================
# Public API
# ======================================================================

def validate_caddyfile(content: str) -> CaddyfileValidationResult:
    """
    Score how much *content* looks like a Caddyfile.

    Never raises: every failure mode is reported through ``errors`` and
    ``warnings`` of the returned result.

    Args:
        content: Raw uploaded text.

    Returns:
        CaddyfileValidationResult with confidence_score in [0, 100].
    """
    if not content or not content.strip():
        return _disqualified(MSG_EMPTY)

    if any(marker in content for marker in HTML_MARKERS):
        return _disqualified(MSG_HTML)

    if _looks_like_json(content):
        return _disqualified(MSG_JSON)

    warnings: List[str] = []
    errors: List[str] = []
    score = 0
    directive_matches = 0

    for line in content.split("\n"):
        trimmed = line.strip()

        # Skip empty lines and comments
        if not trimmed or trimmed.startswith(COMMENT_PREFIX):
            continue

        if DIRECTIVE_PATTERN.match(trimmed):
            directive_matches += 1
            score += DIRECTIVE_WEIGHT

        if _is_site_address(trimmed):
            score += SITE_ADDRESS_WEIGHT

        if trimmed in ("{", "}"):
            score += BRACE_WEIGHT

        if any(marker in trimmed for marker in SERVER_SCRIPT_MARKERS):
            return _disqualified(MSG_SERVER_SCRIPT, warnings)

        if any(marker in trimmed for marker in CLIENT_SCRIPT_MARKERS):
            warnings.append(MSG_CLIENT_SCRIPT)
            score -= SCRIPT_PENALTY

    confidence = int(np.clip(score, MIN_CONFIDENCE, MAX_CONFIDENCE))

    if confidence >= VALID_CONFIDENCE:
        is_valid = True
    elif confidence >= LOW_CONFIDENCE:
        is_valid = True
        warnings.append(MSG_LOW_CONFIDENCE.format(confidence=confidence))
    else:
        is_valid = False
        errors.append(MSG_NOT_CADDYFILE.format(confidence=confidence))

    if directive_matches == 0 and confidence < VALID_CONFIDENCE:
        warnings.append(MSG_NO_DIRECTIVES)

    return CaddyfileValidationResult(
        is_valid=is_valid,
        confidence_score=confidence,
        warnings=tuple(warnings),
        errors=tuple(errors),
    )
