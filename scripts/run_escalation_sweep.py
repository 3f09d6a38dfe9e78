"""Cron entrypoint: run one escalation sweep, then repair missed promotions.

Usage:
    python scripts/run_escalation_sweep.py [--skip-reconcile]

Exit status is 1 when any item in the sweep failed.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from deskreview.core.config import AppSettings
from deskreview.core.logging import configure_logging
from deskreview.services.container import build_services

logger = logging.getLogger("deskreview.sweep")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the deskreview escalation sweep")
    parser.add_argument("--skip-reconcile", action="store_true", help="Do not re-run learning example promotion")
    args = parser.parse_args(argv)

    settings = AppSettings()
    configure_logging(settings.log_level, json_output=settings.log_json)
    services = build_services(settings)

    summary = services.scheduler.run_sweep()
    print(json.dumps(summary.model_dump(mode="json"), indent=2))

    if not args.skip_reconcile:
        checked = services.reviews.reconcile_promotions()
        logger.info("Reconciled promotions", extra={"checked": checked})

    return 1 if summary.errors else 0


if __name__ == "__main__":
    sys.exit(main())
