"""Receipt: a payment event recorded against exactly one admission."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from feeledger.core.enums import CollectedTowards
from feeledger.db.session import Base


class Receipt(Base):
    __tablename__ = "receipts"
    __table_args__ = (
        CheckConstraint("amount_collected > 0", name="chk_receipt_amount_positive"),
        CheckConstraint(
            "collected_towards IN ('ADMISSION_FEE','COURSE_FEE','SEMESTER_FEE','OTHER')",
            name="chk_receipt_collected_towards",
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    admission_id = Column(
        UUID(as_uuid=True),
        ForeignKey("admissions.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    receipt_number = Column(String(50), nullable=False, unique=True)
    amount_collected = Column(Numeric(12, 2), nullable=False)
    collected_towards = Column(String(30), nullable=False, default=CollectedTowards.COURSE_FEE.value)
    payment_date = Column(Date, nullable=False)
    payment_mode = Column(String(30), nullable=False)  # CASH, UPI, CARD, BANK, ...
    transaction_id = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    admission = relationship("Admission", back_populates="receipts")
    created_by_user = relationship("User", foreign_keys=[created_by])
