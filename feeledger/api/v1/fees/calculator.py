"""
Fee arithmetic for an admission. Pure functions, no I/O.

total_fee = admission_fee + course_fee + semester_fee - agent_commission   (unclamped)
total_paid = sum of amount_collected over the admission's receipts
balance    = max(0, total_fee - total_paid)
"""

from decimal import Decimal
from typing import Any, Iterable


ZERO = Decimal("0")


def to_decimal(val) -> Decimal:
    if val is None:
        return ZERO
    return val if isinstance(val, Decimal) else Decimal(str(val))


def compute_total_fee(schedule: Any) -> Decimal:
    """
    Total payable for a course fee schedule (a Course row or anything with the same fee attributes).

    Not clamped: a commission larger than the fee sum yields a negative total so callers can
    detect the misconfiguration.
    """
    fee_sum = (
        to_decimal(schedule.admission_fee)
        + to_decimal(schedule.course_fee)
        + to_decimal(schedule.semester_fee)
    )
    return fee_sum - to_decimal(schedule.agent_commission)


def compute_total_paid(receipts: Iterable[Any]) -> Decimal:
    return sum((to_decimal(r.amount_collected) for r in receipts), ZERO)


def compute_balance(total_fee: Decimal, total_paid: Decimal) -> Decimal:
    """Outstanding amount. Overpayment is absorbed as a zero balance, never a credit."""
    return max(ZERO, to_decimal(total_fee) - to_decimal(total_paid))
