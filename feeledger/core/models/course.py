"""Course: catalog entry carrying the fee schedule an admission is billed against."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Numeric, String
from sqlalchemy.dialects.postgresql import UUID

from feeledger.db.session import Base


class Course(Base):
    """Fee schedule per course. Owned by the course catalog; read-only to the fee ledger."""

    __tablename__ = "courses"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False, unique=True)
    admission_fee = Column(Numeric(12, 2), nullable=True)
    course_fee = Column(Numeric(12, 2), nullable=True)
    semester_fee = Column(Numeric(12, 2), nullable=True)
    # Subtracted from the fee sum when computing the total payable
    agent_commission = Column(Numeric(12, 2), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
