#!/usr/bin/env python3
"""
Migration script to store owner_professional_id in system_settings.

Older data identified the owner implicitly (the professional who is not the
partner). This script runs that inference once and stores the result, after
which the calculation engine no longer looks at names.

NOTE: This is a one-time migration script. Once the setting exists it does
nothing.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add backend/src to path
backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

from core.database import get_db_context, is_database_configured
from services.settings_service import SettingsService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Store owner_professional_id from the legacy name heuristic.")
    parser.add_argument("--dry-run", action="store_true", help="Show the inferred owner without writing it")
    args = parser.parse_args(argv)

    if not is_database_configured():
        logger.error("DATABASE_URL environment variable not set")
        return 1

    with get_db_context() as db:
        result = SettingsService.migrate_owner_professional_setting(db, dry_run=args.dry_run)

    if result.owner_professional_id is None:
        logger.error("Owner could not be inferred; set owner_professional_id manually")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
