"""
Settings service for system-wide key/value settings.

Centralizes reads and writes of the system_settings table, including the
one-off migration that stores owner_professional_id explicitly.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.constants import SETTING_OWNER_PROFESSIONAL_ID
from models import Professional as ProfessionalRow, SystemSetting
from services.owner_resolution_service import configured_owner_professional_id, infer_owner_professional_id
from services.reference_data_service import professional_from_row

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OwnerMigrationResult:
    """Outcome of migrate_owner_professional_setting."""
    owner_professional_id: Optional[str]
    already_configured: bool
    written: bool


class SettingsService:
    """
    Service class for system settings operations.

    Values are stored as strings; typed parsing happens where they are used.
    """

    @staticmethod
    def get_all(db: Session) -> Dict[str, str]:
        """Return every setting as a key -> value dict."""
        return {row.key: row.value or "" for row in db.scalars(select(SystemSetting)).all()}

    @staticmethod
    def get_value(db: Session, key: str) -> Optional[str]:
        row = db.scalars(select(SystemSetting).where(SystemSetting.key == key)).first()
        return row.value if row is not None else None

    @staticmethod
    def set_value(db: Session, key: str, value: str, description: Optional[str] = None) -> SystemSetting:
        """
        Create or update a setting. The caller commits.

        Args:
            db: Database session
            key: Setting name
            value: New value
            description: Stored only when given
        """
        row = db.scalars(select(SystemSetting).where(SystemSetting.key == key)).first()
        if row is None:
            row = SystemSetting(key=key, value=value, description=description)
            db.add(row)
        else:
            row.value = value
            if description is not None:
                row.description = description
        db.flush()
        return row

    @staticmethod
    def migrate_owner_professional_setting(db: Session, dry_run: bool = False) -> OwnerMigrationResult:
        """
        Store owner_professional_id using the legacy name heuristic.

        Does nothing when the setting already has a value. The heuristic picks
        the first professional (by name) who is not the partner.
        """
        settings = SettingsService.get_all(db)
        existing = configured_owner_professional_id(settings)
        if existing:
            logger.info(f"{SETTING_OWNER_PROFESSIONAL_ID} already set to {existing}; nothing to do")
            return OwnerMigrationResult(owner_professional_id=existing, already_configured=True, written=False)

        professionals = [
            professional_from_row(row)
            for row in db.scalars(select(ProfessionalRow).order_by(ProfessionalRow.name, ProfessionalRow.id)).all()
        ]
        owner_id = infer_owner_professional_id(professionals)
        if owner_id is None:
            logger.warning("Could not infer the owner: every professional matches the partner name")
            return OwnerMigrationResult(owner_professional_id=None, already_configured=False, written=False)

        owner_name = next(p.name for p in professionals if p.id == owner_id)
        if dry_run:
            logger.info(f"[Dry Run] Would set {SETTING_OWNER_PROFESSIONAL_ID} = {owner_id} ({owner_name})")
            return OwnerMigrationResult(owner_professional_id=owner_id, already_configured=False, written=False)

        SettingsService.set_value(
            db,
            SETTING_OWNER_PROFESSIONAL_ID,
            owner_id,
            description="Professional who receives the net value by default",
        )
        db.commit()
        logger.info(f"Set {SETTING_OWNER_PROFESSIONAL_ID} = {owner_id} ({owner_name})")
        return OwnerMigrationResult(owner_professional_id=owner_id, already_configured=False, written=True)
