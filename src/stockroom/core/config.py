import os

from ..common.models import Currency

# Loaded from the environment, with defaults suitable for local development
DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite://./stockroom.sqlite3")
RECORDS_PER_PAGE: int = int(os.getenv("RECORDS_PER_PAGE", "10"))
BASE_CURRENCY: str = os.getenv("BASE_CURRENCY", "GBP").upper()
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

if RECORDS_PER_PAGE < 1:
    raise ValueError(f"RECORDS_PER_PAGE must be a positive integer, got {RECORDS_PER_PAGE}")
if BASE_CURRENCY not in {c.value for c in Currency}:
    raise ValueError(f"BASE_CURRENCY must be one of {[c.value for c in Currency]}, got {BASE_CURRENCY!r}")
