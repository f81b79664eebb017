"""
CaddyfileValidationResult — outcome of the heuristic Caddyfile validator.
"""
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class CaddyfileValidationResult:
    """Verdict on whether a text plausibly is a Caddyfile."""

    is_valid: bool
    confidence_score: int                               # clamped to [0, 100]
    warnings: Tuple[str, ...] = ()
    errors: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Lists passed in by callers are copied into tuples
        object.__setattr__(self, "warnings", tuple(self.warnings))
        object.__setattr__(self, "errors", tuple(self.errors))

    def to_dict(self) -> dict:
        return {
            "valid": self.is_valid,
            "confidence": self.confidence_score,
            "warnings": list(self.warnings),
            "errors": list(self.errors),
        }
