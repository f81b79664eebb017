"""
Check a Caddyfile with the heuristic validator and print a summary.

Usage:
    python run_caddyfile_check.py [PATH] [--apply] [--metrics]

Reads PATH (default: CADDYFILE_PATH from settings). When the file is missing
and Caddy's admin API is reachable, the live config is read instead.
With --apply, an accepted Caddyfile is loaded into Caddy. With --metrics, the
Caddy and Caddyfile gauges are refreshed and printed in Prometheus format.
"""
import json
import logging
import sys

from clubs.caddy.admin_client import CaddyAdminClient, CaddyAdminError
from clubs.config.settings import CADDYFILE_PATH, LOG_LEVEL
from clubs.imports.collector import collect_metrics
from clubs.imports.pipeline import (
    CaddyfileRejectedError,
    analyze_caddyfile,
    apply_content,
    read_caddyfile,
)

# ---------------------------------------------------------------------------
# Setup logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger("run_caddyfile_check")


def print_summary(report: dict, path: str) -> None:
    validation = report["validation"]
    stats = report["stats"]

    print("\n" + "=" * 70)
    print("CADDYFILE CHECK — SUMMARY")
    print("=" * 70)
    print(f"file        : {path}")
    print(f"valid       : {validation['valid']}")
    print(f"confidence  : {validation['confidence']}%")
    print(f"site blocks : {stats['siteBlocks']}")
    print(f"directives  : {stats['directives']}")
    if "services" in stats:
        print(f"services    : {stats['services']}")

    for err in validation["errors"]:
        print(f"  [ERROR]   {err}")
    for warn in validation["warnings"]:
        print(f"  [WARNING] {warn}")
    print("=" * 70 + "\n")


def main(argv: list) -> int:
    args = [a for a in argv if not a.startswith("--")]
    path = args[0] if args else CADDYFILE_PATH
    apply = "--apply" in argv

    client = CaddyAdminClient()

    if "--metrics" in argv:
        print(collect_metrics(client, path), end="")
        return 0

    try:
        content = read_caddyfile(path, client)
    except FileNotFoundError:
        logger.error("Caddyfile not found: %s", path)
        return 2
    except CaddyAdminError as exc:
        logger.error("Caddyfile not found and live config unreadable: %s", exc)
        return 2

    report = analyze_caddyfile(content, source="file")
    print_summary(report, path)

    if not apply:
        return 0 if report["accepted"] else 1

    try:
        report = apply_content(content, client, report)
    except CaddyfileRejectedError as exc:
        logger.error("Not applied: %s", exc)
        return 1
    except CaddyAdminError as exc:
        logger.error("Caddy refused the configuration: %s", exc)
        return 1

    logger.info("Configuration applied successfully")
    print(json.dumps(report["stats"], indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
