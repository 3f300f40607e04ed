"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
Turn-level failures of the completion exchange derive from CompletionError
so the session loop can handle them in one place.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class ConfigurationError(ApplicationError):
    """Raised when configuration or credentials are missing or invalid."""

    def __init__(self, message: str = "Invalid configuration") -> None:
        super().__init__(message, code="CFG_INVALID")


class ValidationError(ApplicationError):
    """Raised when validation fails."""

    def __init__(self, message: str = "Validation failed", details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message, code="VAL_VALIDATION_ERROR")


class CompletionError(ApplicationError):
    """Base exception for a failed completion turn."""


class EncodingError(CompletionError):
    """Raised when the request body cannot be serialized."""

    def __init__(self, message: str = "Request encoding failed") -> None:
        super().__init__(message, code="CMP_ENCODING_ERROR")


class TransportError(CompletionError):
    """Raised when the HTTP call fails before a response arrives."""

    def __init__(self, message: str = "Transport error") -> None:
        super().__init__(message, code="CMP_TRANSPORT_ERROR")


class DecodingError(CompletionError):
    """Raised when a response body does not match the expected schema."""

    def __init__(self, message: str = "Response decoding failed") -> None:
        super().__init__(message, code="CMP_DECODING_ERROR")


class APIError(CompletionError):
    """Raised when the API answers with a non-success status."""

    def __init__(self, status_code: int, reason: str, detail: str | None = None) -> None:
        self.status_code = status_code
        self.reason = reason
        self.detail = detail
        message = f"{status_code} {reason}".rstrip()
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, code="CMP_API_ERROR")
