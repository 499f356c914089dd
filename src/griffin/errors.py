"""Error taxonomy shared by the services and the HTTP boundary."""

from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    """Stable error codes returned in the error envelope."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNSUPPORTED_CHAIN = "UNSUPPORTED_CHAIN"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_ADDRESS = "INVALID_ADDRESS"
    MISSING_SIGNATURE = "MISSING_SIGNATURE"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    NO_TOKENS_FOUND = "NO_TOKENS_FOUND"
    INTENT_NOT_FOUND = "INTENT_NOT_FOUND"
    INVALID_STATUS = "INVALID_STATUS"
    CANNOT_CANCEL = "CANNOT_CANCEL"
    NO_ROUTES_AVAILABLE = "NO_ROUTES_AVAILABLE"
    ROUTE_EXPIRED = "ROUTE_EXPIRED"
    EXECUTION_FAILED = "EXECUTION_FAILED"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class AppError(Exception):
    """A business or validation error with an HTTP status and a stable code."""

    def __init__(
        self,
        message: str,
        status_code: int,
        code: ErrorCode,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details
        super().__init__(message)

    def __repr__(self) -> str:
        return f"AppError({self.code.value}, {self.status_code}, {self.message!r})"


class QuoteProviderError(RuntimeError):
    """Raised by a quote provider when it cannot produce quotes."""

    def __init__(self, provider: str, reason: str):
        self.provider = provider
        self.reason = reason
        super().__init__(f"{provider}: {reason}")
