"""
Custom Exception Hierarchy

Every expected failure is an ``AppException`` carrying an ``ErrorCode`` and the
HTTP status it maps to; the handlers in ``app.core.middleware`` render them as
``{"error": {"code", "message", "details"}}``.
"""
from typing import Any
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for API responses"""

    # General errors (1xxx)
    INTERNAL_ERROR = "ERR_1000"
    VALIDATION_ERROR = "ERR_1001"
    NOT_FOUND = "ERR_1002"
    ALREADY_EXISTS = "ERR_1003"
    UNAUTHORIZED = "ERR_1004"
    FORBIDDEN = "ERR_1005"

    # Auth errors (2xxx)
    INVALID_CREDENTIALS = "ERR_2001"
    TOKEN_EXPIRED = "ERR_2002"
    TOKEN_INVALID = "ERR_2003"

    # User errors (3xxx)
    USER_NOT_FOUND = "ERR_3001"
    EMAIL_ALREADY_REGISTERED = "ERR_3002"

    # Transaction errors (4xxx)
    TRANSACTION_NOT_FOUND = "ERR_4001"
    INVALID_TRANSACTION_STATE = "ERR_4002"
    FUEL_PRICE_NOT_FOUND = "ERR_4003"
    INVALID_QUANTITY = "ERR_4004"


class AppException(Exception):
    """Base exception for all application errors"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API response"""
        return {
            "error": {
                "code": self.error_code.value,
                "message": self.message,
                "details": self.details
            }
        }


class ValidationException(AppException):
    """Raised when input validation fails"""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=400,
            details=details
        )
        if field:
            self.details["field"] = field


class NotFoundException(AppException):
    """Raised when a requested resource is not found"""

    def __init__(
        self,
        resource: str,
        identifier: Any,
        error_code: ErrorCode = ErrorCode.NOT_FOUND
    ):
        super().__init__(
            message=f"{resource} not found: {identifier}",
            error_code=error_code,
            status_code=404,
            details={"resource": resource, "identifier": str(identifier)}
        )


class ConflictException(AppException):
    """Raised when a write collides with an existing row (uniqueness)"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.ALREADY_EXISTS,
        details: dict[str, Any] | None = None
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=409,
            details=details
        )


class UnauthorizedException(AppException):
    """Raised when the caller is not authenticated"""

    def __init__(
        self,
        message: str = "Not authenticated",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=401
        )


class ForbiddenException(AppException):
    """Raised when an authenticated caller lacks the required role"""

    def __init__(self, message: str = "Insufficient permissions", required_role: str | None = None):
        super().__init__(
            message=message,
            error_code=ErrorCode.FORBIDDEN,
            status_code=403
        )
        if required_role:
            self.details["required_role"] = required_role


class UserNotFoundError(NotFoundException):
    """Raised when user is not found"""

    def __init__(self, identifier: Any):
        super().__init__("User", identifier, error_code=ErrorCode.USER_NOT_FOUND)


class TransactionNotFoundError(NotFoundException):
    """Raised when a transaction does not exist or is not owned by the caller"""

    def __init__(self, transaction_id: Any):
        super().__init__("Transaction", transaction_id, error_code=ErrorCode.TRANSACTION_NOT_FOUND)


class TransactionStateError(AppException):
    """Raised when a transaction is not in the state an operation requires"""

    def __init__(self, transaction_id: Any, current_state: str, target_state: str):
        super().__init__(
            message=f"Transaction {transaction_id} cannot move from '{current_state}' to '{target_state}'",
            error_code=ErrorCode.INVALID_TRANSACTION_STATE,
            status_code=409,
            details={
                "transaction_id": str(transaction_id),
                "current_state": current_state,
                "target_state": target_state,
            }
        )
