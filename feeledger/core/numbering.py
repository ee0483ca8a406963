"""
Human-readable document numbers.
Receipt:   RCP-YYMMDD-NNNN
Admission: ADM-YYYYMMDD-NNNN
Uniqueness is enforced by the database; callers retry on collision.
"""

import secrets
from datetime import datetime
from typing import Optional


def _random_suffix() -> str:
    return str(secrets.randbelow(10000)).zfill(4)


def generate_receipt_number(now: Optional[datetime] = None) -> str:
    """
    Examples:
        2026-10-16 -> RCP-261016-0427
    """
    now = now or datetime.now()
    return f"RCP-{now.strftime('%y%m%d')}-{_random_suffix()}"


def generate_admission_number(now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return f"ADM-{now.strftime('%Y%m%d')}-{_random_suffix()}"
