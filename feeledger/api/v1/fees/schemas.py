"""Fees schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from feeledger.core.enums import CollectedTowards


# --- Receipt ---
class ReceiptCreate(BaseModel):
    # Generated (RCP-YYMMDD-NNNN) when omitted
    receipt_number: Optional[str] = Field(None, max_length=50)
    # Whole cents only (stored as Numeric(12, 2)); positivity is checked by the receipt validator
    amount_collected: Decimal = Field(..., max_digits=12, decimal_places=2)
    collected_towards: CollectedTowards
    payment_date: date
    payment_mode: str = Field(..., min_length=1, description="CASH, UPI, CARD, BANK")
    transaction_id: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None
    next_due_date: Optional[date] = Field(None, description="Applied to the admission while a balance remains")


class ReceiptUpdate(BaseModel):
    receipt_number: Optional[str] = Field(None, min_length=1, max_length=50)
    amount_collected: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    collected_towards: Optional[CollectedTowards] = None
    payment_date: Optional[date] = None
    payment_mode: Optional[str] = Field(None, min_length=1)
    transaction_id: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None
    next_due_date: Optional[date] = None


class ReceiptResponse(BaseModel):
    id: UUID
    admission_id: UUID
    receipt_number: str
    amount_collected: Decimal
    collected_towards: CollectedTowards
    payment_date: date
    payment_mode: str
    transaction_id: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ReceiptDeleteResponse(BaseModel):
    success: bool
    receipt_id: UUID
    admission_id: UUID


class ReceiptNumberResponse(BaseModel):
    receipt_number: str


# --- Fee details ---
class FeeDetailsResponse(BaseModel):
    admission_id: UUID
    total_fee: Decimal
    total_paid: Decimal
    balance: Decimal
    admission_fee: Decimal
    course_fee: Decimal
    semester_fee: Decimal
    agent_commission: Decimal
    next_due_date: Optional[date] = None


class ReceiptWithAdmissionResponse(BaseModel):
    """Everything a receipt document renderer needs for one receipt."""

    receipt: ReceiptResponse
    admission_number: str
    candidate_name: str
    course_name: str
    fee_details: FeeDetailsResponse
    receipts: List[ReceiptResponse]
