#!/usr/bin/env python3
"""
Recalculate the stored financial breakdown of every appointment.

Use this after changing split rules, bonus rules, card fee rates or system
settings, or after a calculation fix. Appointments with a manual net value
keep it; their card fee is solved backward from it.

Usage:
    python backend/scripts/recalculate_appointments.py --dry-run
    python backend/scripts/recalculate_appointments.py
    python backend/scripts/recalculate_appointments.py --verbose --infer-owner

Exit code 1 when DATABASE_URL is missing, reference data cannot be loaded, or
owner_professional_id is not configured.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add backend/src to path
backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

from core.config import LOG_LEVEL
from core.database import get_db_context, is_database_configured
from services.appointment_recalculation_service import AppointmentRecalculationService
from services.errors import OwnerNotConfiguredError, ReferenceDataError

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Recalculate stored appointment values.")
    parser.add_argument("--dry-run", action="store_true", help="Report differences without writing them")
    parser.add_argument("--verbose", action="store_true", help="Also log unchanged and skipped appointments")
    parser.add_argument(
        "--infer-owner",
        action="store_true",
        help="Infer the owner from professional names when owner_professional_id is not set",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    if not is_database_configured():
        logger.error("DATABASE_URL environment variable not set")
        return 1

    try:
        with get_db_context() as db:
            report = AppointmentRecalculationService.recalculate_all(
                db,
                dry_run=args.dry_run,
                verbose=args.verbose,
                allow_name_heuristic=args.infer_owner,
            )
    except (ReferenceDataError, OwnerNotConfiguredError) as e:
        logger.error(f"Recalculation aborted: {e}")
        return 1

    print("=" * 60)
    print(f"Total appointments: {report.total}")
    print(f"Unchanged:          {report.unchanged}")
    print(f"{'Would update' if report.dry_run else 'Updated'}:       {report.updated}")
    print(f"Errors:             {report.errors}")
    print(f"Owner delta:        {report.total_owner_delta:+.2f}")
    print(f"Professional delta: {report.total_professional_delta:+.2f}")
    if report.dry_run and report.updated:
        print(">>> Run without --dry-run to apply the corrections <<<")
    return 0


if __name__ == "__main__":
    sys.exit(main())
