from feeledger.core.models.course import Course
from feeledger.core.models.admission import Admission
from feeledger.core.models.receipt import Receipt
from feeledger.core.models.fee_audit_log import FeeAuditLog

__all__ = [
    "Course",
    "Admission",
    "Receipt",
    "FeeAuditLog",
]
