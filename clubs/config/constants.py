"""
Constants used by the Caddyfile heuristics.
Pinned so that scores are reproducible across releases.
"""
from typing import List

# =============================================================================
# Directive vocabulary (matched case-insensitively at line start)
# =============================================================================
COMMON_DIRECTIVES: List[str] = [
    "root",
    "file_server",
    "reverse_proxy",
    "handle",
    "route",
    "encode",
    "log",
    "tls",
    "respond",
    "redir",
    "rewrite",
    "header",
    "basicauth",
    "request_header",
    "uri",
    "try_files",
    "php_fastcgi",
    "templates",
    "import",
    "vars",
    "bind",
    "acme_server",
]

# =============================================================================
# Score weights
# =============================================================================
DIRECTIVE_WEIGHT: int = 15
SITE_ADDRESS_WEIGHT: int = 10
BRACE_WEIGHT: int = 5
SCRIPT_PENALTY: int = 20

# =============================================================================
# Confidence thresholds (percent)
# =============================================================================
MIN_CONFIDENCE: int = 0
MAX_CONFIDENCE: int = 100
VALID_CONFIDENCE: int = 50
LOW_CONFIDENCE: int = 30

# =============================================================================
# Content sniffing
# =============================================================================
HTML_MARKERS: List[str] = ["<!DOCTYPE", "<html"]
SERVER_SCRIPT_MARKERS: List[str] = ["<?php", "<?="]
CLIENT_SCRIPT_MARKERS: List[str] = ["function(", "const ", "let ", "var "]

COMMENT_PREFIX: str = "#"

# =============================================================================
# Messages
# =============================================================================
MSG_EMPTY: str = "File is empty"
MSG_HTML: str = "File appears to be HTML, not a Caddyfile"
MSG_JSON: str = "File appears to be JSON, not a Caddyfile"
MSG_SERVER_SCRIPT: str = "File appears to contain embedded script code (PHP)"
MSG_CLIENT_SCRIPT: str = "File may contain script code (JavaScript)"
MSG_LOW_CONFIDENCE: str = "Low confidence ({confidence}%). This may not be a valid Caddyfile."
MSG_NOT_CADDYFILE: str = "File does not appear to be a valid Caddyfile (confidence: {confidence}%)"
MSG_NO_DIRECTIVES: str = (
    "No recognized Caddy directives found. "
    "This might be a minimal configuration or not a Caddyfile."
)

# =============================================================================
# Upstream health levels (exported as caddy_upstream_health_status)
# =============================================================================
HEALTH_OFFLINE: int = 0
HEALTH_UNHEALTHY: int = 1
HEALTH_DEGRADED: int = 2
HEALTH_HEALTHY: int = 3

UNHEALTHY_FAILURE_RATE: float = 10.0    # percent
UNHEALTHY_FAILS: int = 20
DEGRADED_FAILURE_RATE: float = 1.0      # percent
