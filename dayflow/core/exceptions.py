from typing import Any, Dict, Optional

class AppException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

class AuthenticationError(AppException):
    def __init__(self, message: str = "Not authenticated"):
        super().__init__(
            message=message,
            status_code=401,
            error_code="UNAUTHENTICATED"
        )

class AccessDeniedError(AppException):
    """Custom permission error. Named AccessDeniedError to avoid shadowing Python's built-in PermissionError."""
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            message=message,
            status_code=403,
            error_code="PERMISSION_DENIED"
        )

class CrossTenantError(AppException):
    def __init__(self, message: str = "Resource belongs to a different company"):
        super().__init__(
            message=message,
            status_code=403,
            error_code="CROSS_TENANT"
        )

class NotFoundError(AppException):
    def __init__(self, message: str = "Resource not found"):
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND"
        )

class InvalidStateError(AppException):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=409,
            error_code="INVALID_STATE",
            details=details
        )

class InputValidationError(AppException):
    """Malformed or missing input. Not to be confused with pydantic's ValidationError."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=422,
            error_code="VALIDATION_ERROR",
            details=details
        )

class AllocationMissingError(AppException):
    def __init__(self, leave_type: str):
        super().__init__(
            message=f"No {leave_type} allocation found",
            status_code=400,
            error_code="ALLOCATION_MISSING",
            details={"leave_type": leave_type}
        )

class InsufficientBalanceError(AppException):
    def __init__(self, leave_type: str, requested: float, available: float):
        super().__init__(
            message=f"Not enough {leave_type} available. You have {available:g} days left.",
            status_code=400,
            error_code="INSUFFICIENT_BALANCE",
            details={"leave_type": leave_type, "requested": requested, "available": available}
        )

class NoCheckInError(AppException):
    def __init__(self):
        super().__init__(
            message="No check-in record found for today",
            status_code=409,
            error_code="NO_CHECK_IN"
        )

class OnApprovedLeaveError(AppException):
    def __init__(self, leave_request_id: Optional[int] = None):
        super().__init__(
            message="You are on approved leave today. Check-in is not available.",
            status_code=409,
            error_code="ON_APPROVED_LEAVE",
            details={"leave_request_id": leave_request_id}
        )

class StoreError(AppException):
    """Wraps a lower-level data store failure."""
    def __init__(self, message: str = "Data store operation failed"):
        super().__init__(
            message=message,
            status_code=503,
            error_code="STORE_ERROR"
        )
