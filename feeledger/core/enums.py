from enum import Enum


class CollectedTowards(str, Enum):
    ADMISSION_FEE = "ADMISSION_FEE"
    COURSE_FEE = "COURSE_FEE"
    SEMESTER_FEE = "SEMESTER_FEE"
    OTHER = "OTHER"


class ReceiptRule(str, Enum):
    AMOUNT_NOT_POSITIVE = "AMOUNT_NOT_POSITIVE"
    EXCEEDS_BALANCE = "EXCEEDS_BALANCE"
    TRANSACTION_ID_REQUIRED = "TRANSACTION_ID_REQUIRED"
    EXCEEDS_ADMISSION_FEE = "EXCEEDS_ADMISSION_FEE"


class FeeAuditAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
