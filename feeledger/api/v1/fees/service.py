"""
Fee ledger: receipts against an admission, with the admission's balance and next due date
recomputed and written in the same transaction as every receipt change. Financial logic with audit.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, List, NoReturn, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.exc import StaleDataError

from feeledger.core.config import settings
from feeledger.core.enums import FeeAuditAction
from feeledger.core.exceptions import (
    NotFoundError,
    PersistenceFailure,
    ReceiptValidationError,
    ServiceError,
)
from feeledger.core.models import Admission, Receipt
from feeledger.core.numbering import generate_receipt_number

from . import audit_service
from .calculator import compute_balance, compute_total_fee, compute_total_paid, to_decimal
from .schemas import (
    FeeDetailsResponse,
    ReceiptCreate,
    ReceiptDeleteResponse,
    ReceiptResponse,
    ReceiptUpdate,
    ReceiptWithAdmissionResponse,
)
from .validator import normalize_payment_mode, validate_receipt

logger = logging.getLogger(__name__)

# Columns the update endpoint may not null out
_REQUIRED_RECEIPT_FIELDS = {
    "receipt_number",
    "amount_collected",
    "collected_towards",
    "payment_date",
    "payment_mode",
}


def _to_uuid(val):
    if val is None:
        return None
    return val if isinstance(val, UUID) else UUID(str(val))


def _clean(val: Optional[str]) -> Optional[str]:
    return (val or "").strip() or None


def _receipt_audit_value(r: Receipt) -> dict:
    return {
        "receipt_number": r.receipt_number,
        "amount_collected": str(to_decimal(r.amount_collected)),
        "collected_towards": r.collected_towards,
        "payment_date": r.payment_date.isoformat() if r.payment_date else None,
        "payment_mode": r.payment_mode,
        "transaction_id": r.transaction_id,
        "admission_id": str(r.admission_id) if r.admission_id else None,
    }


def _admission_audit_value(a: Admission) -> dict:
    return {
        "balance": str(to_decimal(a.balance)),
        "next_due_date": a.next_due_date.isoformat() if a.next_due_date else None,
    }


# --- Loading ---
async def _load_admission(
    db: AsyncSession,
    admission_id: UUID,
    *,
    for_update: bool = False,
) -> Admission:
    """Admission with course and receipts. for_update takes a row lock held until commit/rollback."""
    stmt = (
        select(Admission)
        .where(Admission.id == admission_id)
        .options(selectinload(Admission.course), selectinload(Admission.receipts))
        .execution_options(populate_existing=True)
    )
    if for_update:
        stmt = stmt.with_for_update()
    admission = (await db.execute(stmt)).scalar_one_or_none()
    if not admission:
        raise NotFoundError("Admission not found")
    return admission


async def _load_receipt(db: AsyncSession, receipt_id: UUID) -> Receipt:
    receipt = await db.get(Receipt, receipt_id)
    if not receipt:
        raise NotFoundError("Receipt not found")
    return receipt


async def _load_owning_admission(db: AsyncSession, receipt: Receipt) -> Admission:
    """Lock the receipt's admission; the receipt must still belong to it once the lock is held."""
    admission = await _load_admission(db, receipt.admission_id, for_update=True)
    if receipt not in admission.receipts:
        await db.rollback()
        raise NotFoundError("Receipt not found")
    return admission


# --- Derived fields ---
def _recalculate_admission(admission: Admission, receipts: Iterable[Receipt]) -> Decimal:
    total_fee = compute_total_fee(admission.course)
    if total_fee < 0:
        logger.warning(
            "Agent commission exceeds fee sum for course %s (total fee %s)",
            admission.course_id,
            total_fee,
        )
    balance = compute_balance(total_fee, compute_total_paid(receipts))
    admission.balance = balance
    return balance


def _resolve_next_due_date(
    balance: Decimal,
    proposed: Optional[date],
    current: Optional[date],
) -> Optional[date]:
    if balance <= 0:
        return None
    return proposed if proposed is not None else current


def _is_receipt_number_conflict(exc: IntegrityError) -> bool:
    # SQLite: "UNIQUE constraint failed: receipts.receipt_number"
    # Postgres: duplicate key ... "receipts_receipt_number_key"
    message = str(exc.orig).lower()
    return "receipt_number" in message and ("unique" in message or "duplicate" in message)


async def _abort_write(db: AsyncSession, exc: Exception, action: str, reference_id: UUID) -> NoReturn:
    await db.rollback()
    if isinstance(exc, IntegrityError):
        if _is_receipt_number_conflict(exc):
            raise ServiceError("Receipt number already exists", status.HTTP_409_CONFLICT) from exc
        logger.warning("Fee ledger %s for %s violated a constraint: %s", action, reference_id, exc.orig)
        raise ServiceError("Receipt violates a fee ledger constraint", status.HTTP_400_BAD_REQUEST) from exc
    logger.warning("Fee ledger %s for %s could not be committed: %s", action, reference_id, exc)
    raise PersistenceFailure() from exc


# --- Responses ---
def _receipt_to_response(r: Receipt) -> ReceiptResponse:
    return ReceiptResponse(
        id=_to_uuid(r.id),
        admission_id=_to_uuid(r.admission_id),
        receipt_number=r.receipt_number,
        amount_collected=to_decimal(r.amount_collected),
        collected_towards=r.collected_towards,
        payment_date=r.payment_date,
        payment_mode=r.payment_mode,
        transaction_id=r.transaction_id,
        notes=r.notes,
        created_by=_to_uuid(r.created_by),
        created_at=r.created_at,
        updated_at=r.updated_at,
    )


def _fee_details(admission: Admission) -> FeeDetailsResponse:
    course = admission.course
    return FeeDetailsResponse(
        admission_id=_to_uuid(admission.id),
        total_fee=compute_total_fee(course),
        total_paid=compute_total_paid(admission.receipts),
        balance=to_decimal(admission.balance),
        admission_fee=to_decimal(course.admission_fee),
        course_fee=to_decimal(course.course_fee),
        semester_fee=to_decimal(course.semester_fee),
        agent_commission=to_decimal(course.agent_commission),
        next_due_date=admission.next_due_date,
    )


def _sorted_receipts(receipts: Iterable[Receipt]) -> List[Receipt]:
    return sorted(receipts, key=lambda r: (r.payment_date, r.created_at), reverse=True)


# --- Ledger mutations ---
async def create_receipt(
    db: AsyncSession,
    admission_id: UUID,
    payload: ReceiptCreate,
    created_by: Optional[UUID] = None,
) -> ReceiptResponse:
    admission = await _load_admission(db, admission_id, for_update=True)
    course = admission.course

    current_balance = compute_balance(
        compute_total_fee(course), compute_total_paid(admission.receipts)
    )
    try:
        validate_receipt(
            payload,
            current_balance,
            course.admission_fee,
            cash_mode=settings.cash_payment_mode,
        )
    except ReceiptValidationError as e:
        await db.rollback()
        logger.warning(
            "Receipt rejected for admission %s: %s (bound %s)", admission_id, e.rule, e.bound
        )
        raise

    receipt = Receipt(
        receipt_number=_clean(payload.receipt_number) or generate_receipt_number(),
        amount_collected=payload.amount_collected,
        collected_towards=payload.collected_towards.value,
        payment_date=payload.payment_date,
        payment_mode=normalize_payment_mode(payload.payment_mode),
        transaction_id=_clean(payload.transaction_id),
        notes=_clean(payload.notes),
        created_by=created_by,
    )
    old_admission = _admission_audit_value(admission)
    try:
        admission.receipts.append(receipt)
        balance = _recalculate_admission(admission, admission.receipts)
        admission.next_due_date = _resolve_next_due_date(
            balance, payload.next_due_date, admission.next_due_date
        )
        await db.flush()
        await audit_service.log_fee_audit(
            db, "receipts", receipt.id,
            FeeAuditAction.CREATE, None, _receipt_audit_value(receipt),
            created_by,
        )
        await audit_service.log_fee_audit(
            db, "admissions", admission.id,
            FeeAuditAction.UPDATE, old_admission, _admission_audit_value(admission),
            created_by,
        )
        await db.commit()
    except (IntegrityError, StaleDataError, OperationalError) as exc:
        await _abort_write(db, exc, "create", admission_id)

    logger.info(
        "Receipt %s recorded for admission %s: %s, balance now %s",
        receipt.receipt_number, admission_id, receipt.amount_collected, balance,
    )
    return _receipt_to_response(receipt)


async def update_receipt(
    db: AsyncSession,
    receipt_id: UUID,
    payload: ReceiptUpdate,
    changed_by: Optional[UUID] = None,
) -> ReceiptResponse:
    """
    Apply any subset of field changes and recompute the owning admission.
    The balance cap is a create-time rule and is not re-checked here.
    """
    receipt = await _load_receipt(db, receipt_id)
    admission = await _load_owning_admission(db, receipt)

    changes = payload.model_dump(exclude_unset=True, exclude={"next_due_date"})
    for field in list(changes):
        if field in _REQUIRED_RECEIPT_FIELDS and changes[field] is None:
            del changes[field]
    if "payment_mode" in changes:
        changes["payment_mode"] = normalize_payment_mode(changes["payment_mode"])
    if "collected_towards" in changes:
        changes["collected_towards"] = changes["collected_towards"].value
    for field in ("receipt_number", "transaction_id", "notes"):
        if field in changes:
            changes[field] = _clean(changes[field])

    old_receipt = _receipt_audit_value(receipt)
    old_admission = _admission_audit_value(admission)
    try:
        for field, value in changes.items():
            setattr(receipt, field, value)
        balance = _recalculate_admission(admission, admission.receipts)
        admission.next_due_date = _resolve_next_due_date(
            balance, payload.next_due_date, admission.next_due_date
        )
        await db.flush()
        await audit_service.log_fee_audit(
            db, "receipts", receipt.id,
            FeeAuditAction.UPDATE, old_receipt, _receipt_audit_value(receipt),
            changed_by,
        )
        await audit_service.log_fee_audit(
            db, "admissions", admission.id,
            FeeAuditAction.UPDATE, old_admission, _admission_audit_value(admission),
            changed_by,
        )
        await db.commit()
    except (IntegrityError, StaleDataError, OperationalError) as exc:
        await _abort_write(db, exc, "update", receipt_id)

    logger.info(
        "Receipt %s updated (%s), admission %s balance now %s",
        receipt.receipt_number, ", ".join(sorted(changes)) or "no changes", admission.id, balance,
    )
    return _receipt_to_response(receipt)


async def delete_receipt(
    db: AsyncSession,
    receipt_id: UUID,
    changed_by: Optional[UUID] = None,
) -> ReceiptDeleteResponse:
    receipt = await _load_receipt(db, receipt_id)
    admission_id = _to_uuid(receipt.admission_id)
    admission = await _load_owning_admission(db, receipt)

    old_receipt = _receipt_audit_value(receipt)
    old_admission = _admission_audit_value(admission)
    try:
        admission.receipts.remove(receipt)
        balance = _recalculate_admission(admission, admission.receipts)
        # Always cleared on delete, even when a balance remains.
        admission.next_due_date = None
        await db.flush()
        await audit_service.log_fee_audit(
            db, "receipts", receipt_id,
            FeeAuditAction.DELETE, old_receipt, None,
            changed_by,
        )
        await audit_service.log_fee_audit(
            db, "admissions", admission_id,
            FeeAuditAction.UPDATE, old_admission, _admission_audit_value(admission),
            changed_by,
        )
        await db.commit()
    except (IntegrityError, StaleDataError, OperationalError) as exc:
        await _abort_write(db, exc, "delete", receipt_id)

    logger.info(
        "Receipt %s deleted, admission %s balance now %s",
        old_receipt["receipt_number"], admission_id, balance,
    )
    return ReceiptDeleteResponse(success=True, receipt_id=receipt_id, admission_id=admission_id)


# --- Reads ---
async def get_fee_details(db: AsyncSession, admission_id: UUID) -> FeeDetailsResponse:
    admission = await _load_admission(db, admission_id)
    return _fee_details(admission)


async def list_receipts(db: AsyncSession, admission_id: UUID) -> List[ReceiptResponse]:
    """Receipts for an admission, latest payment first."""
    admission = await db.get(Admission, admission_id)
    if not admission:
        raise NotFoundError("Admission not found")
    stmt = (
        select(Receipt)
        .where(Receipt.admission_id == admission_id)
        .order_by(Receipt.payment_date.desc(), Receipt.created_at.desc())
    )
    result = await db.execute(stmt)
    return [_receipt_to_response(r) for r in result.scalars().all()]


async def get_receipt(db: AsyncSession, receipt_id: UUID) -> ReceiptResponse:
    return _receipt_to_response(await _load_receipt(db, receipt_id))


async def get_receipt_with_admission(
    db: AsyncSession,
    receipt_id: UUID,
) -> ReceiptWithAdmissionResponse:
    receipt = await _load_receipt(db, receipt_id)
    admission = await _load_admission(db, receipt.admission_id)
    return ReceiptWithAdmissionResponse(
        receipt=_receipt_to_response(receipt),
        admission_number=admission.admission_number,
        candidate_name=admission.candidate_name,
        course_name=admission.course.name,
        fee_details=_fee_details(admission),
        receipts=[_receipt_to_response(r) for r in _sorted_receipts(admission.receipts)],
    )
