"""Application constants and configuration values."""

from decimal import Decimal

from core.config import FRONTEND_URL

# Database field lengths
MAX_STRING_LENGTH = 255
ID_LENGTH = 36  # UUID string identifiers

# Money columns
MONEY_PRECISION = 12
MONEY_SCALE = 2
PERCENTAGE_PRECISION = 7
PERCENTAGE_SCALE = 4

# Database connection settings
DB_POOL_RECYCLE_SECONDS = 300  # 5 minutes

# CORS origins for development and production
_CORS_ORIGINS_RAW = [
    "http://localhost:3000",      # Frontend dev server
    FRONTEND_URL,
]

# Filter out None values and empty strings to avoid CORS errors
CORS_ORIGINS = [origin for origin in _CORS_ORIGINS_RAW if origin and origin.strip()]

# Calculation tolerances
HUNDRED = Decimal("100")
PERCENTAGE_SUM_TOLERANCE = Decimal("0.01")  # Split distributions must sum to 100 within this
RECALCULATION_TOLERANCE = Decimal("0.01")  # Batch diff threshold per field
MANUAL_NET_TOLERANCE = Decimal("0.01")  # Manual net closer than this to the computed net is ignored

# System setting keys
SETTING_DEFAULT_TAX_PERCENTAGE = "default_tax_percentage"
SETTING_BONUS_PERCENTAGE = "vanessa_bonus_percentage"
SETTING_OWNER_PROFESSIONAL_ID = "owner_professional_id"

# Legacy name-keyed business rules (only used when no rule rows are supplied)
LEGACY_ENDOLASER_KEYWORD = "endolaser"
LEGACY_PARTNER_KEYWORD = "valquiria"
LEGACY_PARTNER_ENDOLASER_SHARE = Decimal("50")
