"""
Reconcile Submissions - Report (and optionally repair) submissions whose
stored status disagrees with their approval steps
Run: python -m scripts.reconcile_submissions [--repair] [--since 2026-01-01]
"""
import sys
import os
import argparse
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from formportal.services.reconciliation_service import ReconciliationService
from formportal.utils.logger import setup_logging
from formportal.utils.time import parse_iso


def main():
    parser = argparse.ArgumentParser(description="Detect drift between submission status and approval steps")
    parser.add_argument(
        "--repair",
        action="store_true",
        help="Rewrite drifted submissions from their steps (malformed chains are never touched)"
    )
    parser.add_argument(
        "--since",
        type=str,
        default=None,
        help="Only scan submissions submitted on or after this ISO date"
    )
    args = parser.parse_args()

    setup_logging()
    since = parse_iso(args.since) if args.since else None

    summary = ReconciliationService().run(auto_repair=args.repair, submitted_since=since)

    for report in summary["reports"]:
        kinds = ", ".join(report["kinds"])
        print(f"{report['reference_number']}: stored={report['stored_status']} "
              f"derived={report['derived_status']} [{kinds}]")

    print("-" * 40)
    print(f"Drifted: {summary['drifted']}  Malformed: {summary['malformed']}  Repaired: {summary['repaired']}")
    return 1 if summary["drifted"] and not args.repair else 0


if __name__ == "__main__":
    sys.exit(main())
