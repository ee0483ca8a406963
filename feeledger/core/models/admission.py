"""
Admission: one per enrolled student, aggregate root of the fee ledger.
balance and next_due_date are derived from the course fee schedule and the receipt set;
only the fee service writes them.
"""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from feeledger.db.session import Base


class Admission(Base):
    __tablename__ = "admissions"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="chk_admission_balance_non_negative"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    admission_number = Column(String(30), nullable=False, unique=True)
    candidate_name = Column(String(255), nullable=False)
    course_id = Column(UUID(as_uuid=True), ForeignKey("courses.id", ondelete="RESTRICT"), nullable=False, index=True)
    balance = Column(Numeric(12, 2), nullable=False, default=0)
    next_due_date = Column(Date, nullable=True)
    version = Column(Integer, nullable=False)
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    course = relationship("Course")
    receipts = relationship(
        "Receipt",
        back_populates="admission",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    created_by_user = relationship("User", foreign_keys=[created_by])

    # Concurrent writers on the same admission fail with StaleDataError instead of losing an update
    __mapper_args__ = {"version_id_col": version}
