"""
CaddyfileStats — coarse structural counts for display.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CaddyfileStats:
    """Site block / directive counts extracted from a Caddyfile."""

    site_block_count: int                   # floored at 1
    directive_count: int
    service_count: Optional[int] = None     # only set by enhanced stats

    def to_dict(self) -> dict:
        data = {
            "siteBlocks": self.site_block_count,
            "directives": self.directive_count,
        }
        if self.service_count is not None:
            data["services"] = self.service_count
        return data
