from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from feeledger.auth.dependencies import get_current_user
from feeledger.auth.rbac import check_permission
from feeledger.auth.schemas import CurrentUser
from feeledger.core.exceptions import ServiceError
from feeledger.db.session import get_db

from .schemas import AdmissionCreate, AdmissionResponse
from . import service

router = APIRouter(prefix="/api/v1/admissions", tags=["admissions"])


@router.post(
    "",
    response_model=AdmissionResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("admissions", "create"))],
)
async def open_admission(
    payload: AdmissionCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> AdmissionResponse:
    """Admit a candidate into a course. Balance starts at the course total fee."""
    try:
        return await service.open_admission(db, payload, created_by=current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.get(
    "/{admission_id}",
    response_model=AdmissionResponse,
    dependencies=[Depends(check_permission("admissions", "read"))],
)
async def get_admission(
    admission_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> AdmissionResponse:
    try:
        return await service.get_admission(db, admission_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
