from typing import Any, Optional

from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def detail(self) -> Any:
        return self.message


class NotFoundError(ServiceError):
    """Referenced admission or receipt does not exist."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class ReceiptValidationError(ServiceError):
    """A proposed receipt broke an amount, payment-mode or component-cap rule."""

    def __init__(self, rule: str, message: str, bound: Optional[Any] = None) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)
        self.rule = rule
        self.bound = bound

    @property
    def detail(self) -> Any:
        return {
            "message": self.message,
            "rule": self.rule,
            "bound": None if self.bound is None else str(self.bound),
        }


class PersistenceFailure(ServiceError):
    """The receipt and admission writes could not be committed together. Safe to retry."""

    def __init__(self, message: str = "Fee ledger update could not be completed, please retry") -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)
