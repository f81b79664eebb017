"""
Enhanced stats — recognises the "wildcard site with named host matchers"
layout used to publish many services behind one certificate:

    *.example.com {
        # Photo library
        @photos host photos.example.com
        handle @photos {
            reverse_proxy localhost:2342
        }
    }

Each ``handle @name`` whose matcher is declared becomes a ServiceBlock.
Files in any other shape fall back to the plain line-based stats.
"""
import logging
import re
from typing import Dict, Optional

from clubs.caddyfile.stats import compute_caddyfile_stats
from clubs.config.constants import COMMENT_PREFIX
from clubs.models.caddyfile_stats import CaddyfileStats
from clubs.models.parsed_caddyfile import ParsedCaddyfile, ServiceBlock

logger = logging.getLogger(__name__)

SITE_OPENER_PATTERN = re.compile(r"^[*a-z0-9.-]+\s*\{", re.IGNORECASE)
HOST_MATCHER_PATTERN = re.compile(r"^(@[\w-]+)\s+host\s+([\w.-]+)")
HANDLE_PATTERN = re.compile(r"^handle\s+(@[\w-]+)")
SECTION_BANNER = "===="


def parse_wildcard_with_handles(content: str) -> Optional[ParsedCaddyfile]:
    """
    Parse a single wildcard site block into its services.

    Returns:
        ParsedCaddyfile, or None when no service was recognised.
    """
    services = []
    matchers: Dict[str, str] = {}
    main_address = ""

    in_site_block = False
    depth = 0
    handle_name: Optional[str] = None
    handle_directives: list = []
    handle_start_depth = 0
    last_comment = ""

    for line in content.split("\n"):
        trimmed = line.strip()
        if not trimmed:
            continue

        # Comments describe the next service; banner lines are just decoration
        if trimmed.startswith(COMMENT_PREFIX):
            if SECTION_BANNER not in trimmed:
                last_comment = trimmed.lstrip(COMMENT_PREFIX).strip()
            continue

        if not in_site_block and SITE_OPENER_PATTERN.match(trimmed):
            main_address = trimmed.split("{", 1)[0].strip()
            in_site_block = True
            depth = 1
            continue

        if not in_site_block:
            continue

        open_braces = trimmed.count("{")
        close_braces = trimmed.count("}")

        line_depth = depth
        depth += open_braces - close_braces

        # A closing brace back at the handle's own level ends the service
        if handle_name is not None and close_braces > 0:
            if depth <= handle_start_depth:
                hostname = matchers.get(handle_name)
                if hostname is not None:
                    services.append(
                        ServiceBlock(
                            matcher_name=handle_name,
                            hostname=hostname,
                            description=last_comment or None,
                            directives=handle_directives,
                        )
                    )
                else:
                    logger.debug("handle %s has no host matcher, skipped", handle_name)
                handle_name = None
                handle_directives = []
                last_comment = ""

        if depth <= 0:
            break

        matcher = HOST_MATCHER_PATTERN.match(trimmed)
        if matcher:
            matchers[matcher.group(1)] = matcher.group(2)
            continue

        handle = HANDLE_PATTERN.match(trimmed)
        if handle:
            handle_name = handle.group(1)
            handle_directives = []
            handle_start_depth = line_depth
            continue

        if handle_name is not None and depth > handle_start_depth:
            if trimmed not in ("{", "}"):
                handle_directives.append(trimmed)

    if not services:
        return None

    return ParsedCaddyfile(main_address=main_address, services=services)


def compute_enhanced_stats(content: str) -> CaddyfileStats:
    """
    Stats with a service count when the wildcard/handle layout is detected.

    Falls back to compute_caddyfile_stats() for every other layout.
    """
    parsed = parse_wildcard_with_handles(content)
    if parsed is None:
        return compute_caddyfile_stats(content)

    return CaddyfileStats(
        site_block_count=1,
        directive_count=sum(len(s.directives) for s in parsed.services),
        service_count=len(parsed.services),
    )
