"""
JSON Schemas for Caddy admin API responses.

Two schemas:
1. ADAPT_RESPONSE_SCHEMA    — body returned by POST /adapt
2. UPSTREAMS_RESPONSE_SCHEMA — body returned by GET /reverse_proxy/upstreams

Extra keys are allowed in both; only the fields listed here are read.
"""

# =============================================================================
# 1. POST /adapt
# =============================================================================
ADAPT_RESPONSE_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "result": {
            "type": "object",
            "description": "Adapted JSON config",
        },
        "warnings": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "file": {"type": "string"},
                    "line": {"type": "integer"},
                    "directive": {"type": "string"},
                    "message": {"type": "string"},
                },
            },
        },
        "apps": {
            "type": "object",
            "description": "Present when the adapter returns the bare config",
        },
    },
}

# =============================================================================
# 2. GET /reverse_proxy/upstreams
# =============================================================================
UPSTREAMS_RESPONSE_SCHEMA: dict = {
    "type": "array",
    "items": {
        "type": "object",
        "required": ["address"],
        "properties": {
            "address": {"type": "string", "minLength": 1},
            "num_requests": {"type": "integer", "minimum": 0},
            "fails": {"type": "integer", "minimum": 0},
        },
    },
}
