"""
Admissions as seen by the fee ledger: opening an admission initialises its derived balance
from the course fee schedule. Afterwards only the fees service writes balance/next_due_date.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from feeledger.core.enums import FeeAuditAction
from feeledger.core.exceptions import NotFoundError, ServiceError
from feeledger.core.models import Admission, Course
from feeledger.core.numbering import generate_admission_number

from feeledger.api.v1.fees import audit_service
from feeledger.api.v1.fees.calculator import ZERO, compute_balance, compute_total_fee

from .schemas import AdmissionCreate, AdmissionResponse

logger = logging.getLogger(__name__)

MAX_NUMBER_ATTEMPTS = 10


def _admission_to_response(a: Admission) -> AdmissionResponse:
    return AdmissionResponse(
        id=a.id,
        admission_number=a.admission_number,
        candidate_name=a.candidate_name,
        course_id=a.course_id,
        balance=a.balance,
        next_due_date=a.next_due_date,
        created_by=a.created_by,
        created_at=a.created_at,
        updated_at=a.updated_at,
    )


async def _unique_admission_number(db: AsyncSession) -> str:
    for _ in range(MAX_NUMBER_ATTEMPTS):
        candidate = generate_admission_number()
        existing = (
            await db.execute(select(Admission.id).where(Admission.admission_number == candidate))
        ).scalar_one_or_none()
        if not existing:
            return candidate
    raise ServiceError(
        "Could not generate unique admission number",
        status.HTTP_503_SERVICE_UNAVAILABLE,
    )


async def open_admission(
    db: AsyncSession,
    payload: AdmissionCreate,
    created_by: Optional[UUID] = None,
) -> AdmissionResponse:
    course = await db.get(Course, payload.course_id)
    if not course:
        raise ServiceError("Invalid course", status.HTTP_400_BAD_REQUEST)

    total_fee = compute_total_fee(course)
    if total_fee < 0:
        logger.warning(
            "Agent commission exceeds fee sum for course %s (total fee %s)", course.id, total_fee
        )
    balance = compute_balance(total_fee, ZERO)

    admission = Admission(
        admission_number=await _unique_admission_number(db),
        candidate_name=payload.candidate_name.strip(),
        course_id=course.id,
        balance=balance,
        next_due_date=payload.next_due_date if balance > 0 else None,
        created_by=created_by,
    )
    db.add(admission)
    await db.flush()
    await audit_service.log_fee_audit(
        db, "admissions", admission.id,
        FeeAuditAction.CREATE,
        None,
        {
            "course_id": str(course.id),
            "balance": str(balance),
            "next_due_date": admission.next_due_date.isoformat() if admission.next_due_date else None,
        },
        created_by,
    )
    await db.commit()
    await db.refresh(admission)
    logger.info("Admission %s opened for course %s with balance %s", admission.admission_number, course.id, balance)
    return _admission_to_response(admission)


async def get_admission(db: AsyncSession, admission_id: UUID) -> AdmissionResponse:
    admission = await db.get(Admission, admission_id)
    if not admission:
        raise NotFoundError("Admission not found")
    return _admission_to_response(admission)
