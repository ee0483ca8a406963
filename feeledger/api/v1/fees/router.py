"""Fees router: receipts against admissions and the admission fee details they drive."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from feeledger.auth.dependencies import get_current_user
from feeledger.auth.rbac import check_permission
from feeledger.auth.schemas import CurrentUser
from feeledger.core.exceptions import ServiceError
from feeledger.core.numbering import generate_receipt_number
from feeledger.db.session import get_db

from .schemas import (
    FeeDetailsResponse,
    ReceiptCreate,
    ReceiptDeleteResponse,
    ReceiptNumberResponse,
    ReceiptResponse,
    ReceiptUpdate,
    ReceiptWithAdmissionResponse,
)
from . import service

router = APIRouter(prefix="/api/v1/fees", tags=["fees"])


# --- Admission scoped ---
@router.post(
    "/admissions/{admission_id}/receipts",
    response_model=ReceiptResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("fees", "create"))],
)
async def create_receipt(
    admission_id: UUID,
    payload: ReceiptCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> ReceiptResponse:
    try:
        return await service.create_receipt(
            db, admission_id, payload, created_by=current_user.id
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.get(
    "/admissions/{admission_id}/receipts",
    response_model=List[ReceiptResponse],
    dependencies=[Depends(check_permission("fees", "read"))],
)
async def list_receipts(
    admission_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> List[ReceiptResponse]:
    try:
        return await service.list_receipts(db, admission_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.get(
    "/admissions/{admission_id}/details",
    response_model=FeeDetailsResponse,
    dependencies=[Depends(check_permission("fees", "read"))],
)
async def get_fee_details(
    admission_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> FeeDetailsResponse:
    try:
        return await service.get_fee_details(db, admission_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


# --- Receipts ---
@router.get(
    "/receipts/next-number",
    response_model=ReceiptNumberResponse,
    dependencies=[Depends(check_permission("fees", "read"))],
)
async def next_receipt_number() -> ReceiptNumberResponse:
    """Suggested receipt number for a new receipt form. Not reserved."""
    return ReceiptNumberResponse(receipt_number=generate_receipt_number())


@router.get(
    "/receipts/{receipt_id}",
    response_model=ReceiptResponse,
    dependencies=[Depends(check_permission("fees", "read"))],
)
async def get_receipt(
    receipt_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> ReceiptResponse:
    try:
        return await service.get_receipt(db, receipt_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.get(
    "/receipts/{receipt_id}/with-admission",
    response_model=ReceiptWithAdmissionResponse,
    dependencies=[Depends(check_permission("fees", "read"))],
)
async def get_receipt_with_admission(
    receipt_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> ReceiptWithAdmissionResponse:
    try:
        return await service.get_receipt_with_admission(db, receipt_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.patch(
    "/receipts/{receipt_id}",
    response_model=ReceiptResponse,
    dependencies=[Depends(check_permission("fees", "update"))],
)
async def update_receipt(
    receipt_id: UUID,
    payload: ReceiptUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> ReceiptResponse:
    try:
        return await service.update_receipt(
            db, receipt_id, payload, changed_by=current_user.id
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.delete(
    "/receipts/{receipt_id}",
    response_model=ReceiptDeleteResponse,
    dependencies=[Depends(check_permission("fees", "delete"))],
)
async def delete_receipt(
    receipt_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> ReceiptDeleteResponse:
    try:
        return await service.delete_receipt(db, receipt_id, changed_by=current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
