"""
Custom exceptions for the Coach Briefing service.

The briefing selector and card builder never raise for missing or malformed
snapshot fields; these exceptions cover the request and storage edges.
Each exception carries:
- A descriptive message
- An error code for API responses
- HTTP status code mapping
- Optional details for debugging
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Error codes for consistent API error responses."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNKNOWN_TRIGGER = "UNKNOWN_TRIGGER"
    STORAGE_ERROR = "STORAGE_ERROR"


class CoachBriefingError(Exception):
    """
    Base exception for all Coach Briefing errors.

    Attributes:
        message: Human-readable error message
        code: Error code from ErrorCode enum
        status_code: HTTP status code for API responses
        details: Optional dictionary with additional error details
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API response."""
        result: Dict[str, Any] = {
            "error": {
                "code": self.code.value,
                "message": self.message,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


# ============================================================================
# Validation Errors (400)
# ============================================================================

class ValidationError(CoachBriefingError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=error_details,
        )


class UnknownTriggerError(ValidationError):
    """Raised when an upgrade trigger name is not recognised."""

    def __init__(self, trigger: str) -> None:
        super().__init__(
            message=f"Unknown upgrade trigger: {trigger}",
            field="trigger",
            details={"trigger": trigger},
        )
        self.code = ErrorCode.UNKNOWN_TRIGGER


# ============================================================================
# Storage Errors (500)
# ============================================================================

class StorageError(CoachBriefingError):
    """Raised when the key-value store cannot be read or written."""

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if key:
            error_details["key"] = key
        super().__init__(
            message=message,
            code=ErrorCode.STORAGE_ERROR,
            status_code=500,
            details=error_details,
        )
