"""
Custom exceptions for the training load engine.

Scoring and aggregation degrade numerically instead of failing when data is
missing. The exceptions below are reserved for inputs that are invalid, not
merely incomplete. Each exception includes:
- A descriptive message
- An error code
- Optional details for debugging
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Error codes for consistent error payloads."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Aggregation errors
    INVALID_WINDOW = "INVALID_WINDOW"

    # Provider payload errors
    PROVIDER_PAYLOAD_INVALID = "PROVIDER_PAYLOAD_INVALID"


class TrainingLoadError(Exception):
    """
    Base exception for all training load engine errors.

    Attributes:
        message: Human-readable error message
        code: Error code from ErrorCode enum
        details: Optional dictionary with additional error details
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
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


class InvalidInputError(TrainingLoadError):
    """Raised when an input value is invalid (not just missing)."""

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
            details=error_details,
        )


class InvalidWindowError(InvalidInputError):
    """Raised when a load window ends before it starts."""

    def __init__(self, window_start: Any, window_end: Any) -> None:
        super().__init__(
            message=f"Window start {window_start} is after window end {window_end}",
            details={
                "window_start": str(window_start),
                "window_end": str(window_end),
            },
        )
        self.code = ErrorCode.INVALID_WINDOW


class ProviderPayloadError(TrainingLoadError):
    """Raised when a provider payload cannot be mapped to engine types."""

    def __init__(
        self,
        provider: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        error_details["provider"] = provider
        super().__init__(
            message=f"{provider}: {message}",
            code=ErrorCode.PROVIDER_PAYLOAD_INVALID,
            details=error_details,
        )
