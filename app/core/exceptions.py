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

class InvalidRangeError(AppException):
    def __init__(self, message: str = "Start date must be on or before end date", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="INVALID_RANGE",
            details=details
        )

class PolicyViolationError(AppException):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=422,
            error_code="POLICY_VIOLATION",
            details=details
        )

class InvalidTransitionError(AppException):
    def __init__(self, current: str, target: str):
        super().__init__(
            message=f"Cannot move a leave request from '{current}' to '{target}'",
            status_code=409,
            error_code="INVALID_TRANSITION",
            details={"current": current, "target": target}
        )

class NotFoundError(AppException):
    def __init__(self, entity: str, identifier: Any = None):
        suffix = f" ({identifier})" if identifier is not None else ""
        super().__init__(
            message=f"{entity} not found{suffix}",
            status_code=404,
            error_code="NOT_FOUND",
            details={"entity": entity, "id": identifier}
        )

class ConcurrencyConflictError(AppException):
    def __init__(self, message: str = "The record was changed by another request. Reload and try again."):
        super().__init__(
            message=message,
            status_code=409,
            error_code="CONCURRENT_UPDATE"
        )

class AuthenticationError(AppException):
    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(
            message=message,
            status_code=401,
            error_code="AUTH_FAILED"
        )

class AccessDeniedError(AppException):
    """Custom permission error. Named AccessDeniedError to avoid shadowing Python's built-in PermissionError."""
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            message=message,
            status_code=403,
            error_code="PERMISSION_DENIED"
        )
