"""Admission rules for a new receipt, checked against the ledger state before it is written."""

from decimal import Decimal
from typing import Any, Optional

from feeledger.core.enums import CollectedTowards, ReceiptRule
from feeledger.core.exceptions import ReceiptValidationError

from .calculator import ZERO, to_decimal


def normalize_payment_mode(payment_mode: Optional[str]) -> str:
    return (payment_mode or "").strip().upper()


def validate_receipt(
    receipt: Any,
    current_balance: Decimal,
    admission_fee: Optional[Decimal],
    cash_mode: str = "CASH",
) -> None:
    """
    Raise ReceiptValidationError for the first rule the proposed receipt breaks.

    receipt needs amount_collected, collected_towards, payment_mode and transaction_id.
    current_balance is the balance before this receipt is admitted.
    """
    amount = to_decimal(receipt.amount_collected)
    balance = to_decimal(current_balance)

    if amount <= ZERO:
        raise ReceiptValidationError(
            ReceiptRule.AMOUNT_NOT_POSITIVE.value,
            "Amount must be greater than 0",
            ZERO,
        )

    if amount > balance:
        raise ReceiptValidationError(
            ReceiptRule.EXCEEDS_BALANCE.value,
            f"Amount cannot exceed the remaining balance: {balance}",
            balance,
        )

    mode = normalize_payment_mode(receipt.payment_mode)
    if mode != normalize_payment_mode(cash_mode) and not (receipt.transaction_id or "").strip():
        raise ReceiptValidationError(
            ReceiptRule.TRANSACTION_ID_REQUIRED.value,
            "Transaction ID is required for non-cash payments",
            mode,
        )

    # Component cap only applies when the course defines an admission fee
    cap = to_decimal(admission_fee)
    towards = receipt.collected_towards
    if isinstance(towards, CollectedTowards):
        towards = towards.value
    if towards == CollectedTowards.ADMISSION_FEE.value and cap and amount > cap:
        raise ReceiptValidationError(
            ReceiptRule.EXCEEDS_ADMISSION_FEE.value,
            f"Amount cannot exceed the admission fee: {cap}",
            cap,
        )
