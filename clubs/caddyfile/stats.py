"""
Caddyfile Stats — quick structural counts for the dashboard.

Single pass over the lines:
- top-level lines without a brace are counted as site addresses
- lines inside a block are counted as directives

The site count skips depth-0 lines carrying a brace
(e.g. ``example.com {``), so a file written only with one-line openers
reports the floor value of 1.
"""
from clubs.config.constants import COMMENT_PREFIX
from clubs.models.caddyfile_stats import CaddyfileStats


def _opens_block(line: str) -> bool:
    return line == "{" or line.endswith("{")


def compute_caddyfile_stats(content: str) -> CaddyfileStats:
    """
    Extract basic stats from a Caddyfile.

    Args:
        content: Raw Caddyfile text (may be empty).

    Returns:
        CaddyfileStats with site_block_count >= 1 and directive_count >= 0.
    """
    site_blocks = 0
    directives = 0
    in_block = False
    block_depth = 0

    for line in content.split("\n"):
        trimmed = line.strip()

        # Skip empty lines and comments
        if not trimmed or trimmed.startswith(COMMENT_PREFIX):
            continue

        if trimmed == "}":
            block_depth = max(block_depth - 1, 0)
            if block_depth == 0:
                in_block = False
            continue

        if block_depth == 0 and "{" not in trimmed:
            site_blocks += 1

        # Anything that is not a brace inside a block is a directive
        if in_block and block_depth > 0 and trimmed != "{":
            directives += 1

        if _opens_block(trimmed):
            block_depth += 1
            if block_depth == 1:
                in_block = True

    return CaddyfileStats(
        site_block_count=max(site_blocks, 1),
        directive_count=directives,
    )
