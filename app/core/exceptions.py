from typing import Optional, Any


class MarketplaceError(Exception):
    """
    Base exception for the marketplace application.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ResourceNotFoundError(MarketplaceError):
    """
    Raised when a requested resource is not found.
    """
    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)


class AuthenticationError(MarketplaceError):
    """
    Raised when authentication fails.
    """
    def __init__(self, message: str = "Authentication failed", details: Optional[Any] = None):
        super().__init__(message, code="AUTHENTICATION_FAILED", status_code=401, details=details)


class PermissionDeniedError(MarketplaceError):
    """
    Raised when an authenticated user may not perform an action.
    """
    def __init__(self, message: str = "Permission denied", details: Optional[Any] = None):
        super().__init__(message, code="PERMISSION_DENIED", status_code=403, details=details)


class ValidationError(MarketplaceError):
    """
    Raised when input validation fails.
    """
    def __init__(self, message: str = "Validation error", details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=422, details=details)


class ConflictError(MarketplaceError):
    """
    Raised when an operation conflicts with the current state of a resource.
    """
    def __init__(self, message: str = "Conflict", code: str = "CONFLICT", details: Optional[Any] = None):
        super().__init__(message, code=code, status_code=409, details=details)


class InsufficientFundsError(MarketplaceError):
    """
    Raised when a wallet balance does not cover a purchase.
    """
    def __init__(self, message: str = "Insufficient wallet balance", details: Optional[Any] = None):
        super().__init__(message, code="INSUFFICIENT_FUNDS", status_code=402, details=details)


class ExternalServiceError(MarketplaceError):
    """
    Raised when an external service (e.g., Google, geocoding) fails.
    """
    def __init__(self, message: str = "External service error", details: Optional[Any] = None):
        super().__init__(message, code="EXTERNAL_SERVICE_ERROR", status_code=502, details=details)


class TransactionNotFoundError(ResourceNotFoundError):
    def __init__(self, details: Optional[Any] = None):
        super().__init__("Transaction not found", details=details)
        self.code = "TRANSACTION_NOT_FOUND"


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, details: Optional[Any] = None):
        super().__init__("User not found", details=details)
        self.code = "USER_NOT_FOUND"


class TransactionAlreadyProcessedError(ConflictError):
    def __init__(self, details: Optional[Any] = None):
        super().__init__("Transaction already processed", code="TRANSACTION_ALREADY_PROCESSED", details=details)
