from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class AdmissionCreate(BaseModel):
    candidate_name: str = Field(..., min_length=1, max_length=255)
    course_id: UUID
    # First instalment due date; ignored when the course total is already covered
    next_due_date: Optional[date] = None


class AdmissionResponse(BaseModel):
    id: UUID
    admission_number: str
    candidate_name: str
    course_id: UUID
    balance: Decimal
    next_due_date: Optional[date] = None
    created_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
