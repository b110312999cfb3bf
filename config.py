"""
config.py
Settings read from environment variables once, at import.
"""

from __future__ import annotations

import os
from pathlib import Path


class Settings:
    DB_FILE: Path = Path(os.getenv("MEMBERS_DB_FILE", str(Path(__file__).with_name("members.db"))))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    CURRENCY_CODE: str = os.getenv("CURRENCY_CODE", "KES")
    SAMPLE_MONTHLY_AMOUNT: float = float(os.getenv("SAMPLE_MONTHLY_AMOUNT", "50"))


settings = Settings()
