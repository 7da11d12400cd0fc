"""Inspection engine error handling.

Custom exceptions and error codes shared by the engine, the persistence
gateway and the API layer.
"""
from typing import Optional, Dict, Any


class ErrorCode:
    """Error code constants."""

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_EVALUATION_VALUE = "MISSING_EVALUATION_VALUE"
    INVALID_EVALUATION_VALUE = "INVALID_EVALUATION_VALUE"
    MISSING_SURVEY_METHOD = "MISSING_SURVEY_METHOD"
    MISSING_NOT_CONDUCTED_REASON = "MISSING_NOT_CONDUCTED_REASON"
    EVALUATION_REGRESSION = "EVALUATION_REGRESSION"
    INVALID_MEASUREMENT = "INVALID_MEASUREMENT"

    # Persistence errors
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"
    PERSISTENCE_TIMEOUT = "PERSISTENCE_TIMEOUT"
    STORE_NOT_CONFIGURED = "STORE_NOT_CONFIGURED"


class InspectionError(Exception):
    """Base exception for inspection engine errors.

    Attributes:
        code: Error code from ErrorCode constants
        message: Human-readable error message
        details: Additional error context
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for API response."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class InspectionValidationError(InspectionError):
    """Caller input rejected before any state was touched."""

    def __init__(
        self,
        message: str,
        code: str = ErrorCode.VALIDATION_ERROR,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            code=code,
            message=message,
            details={**(details or {}), "field": field} if field else details
        )
        self.field = field


class PersistenceError(InspectionError):
    """Keyed store failure (read side; writes are best-effort)."""

    def __init__(
        self,
        message: str,
        property_id: str,
        code: str = ErrorCode.PERSISTENCE_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            code=code,
            message=message,
            details={**(details or {}), "property_id": property_id}
        )
        self.property_id = property_id
