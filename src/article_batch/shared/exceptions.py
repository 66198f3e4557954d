"""Custom exceptions with error classification for the article batch tool."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Error codes for classification and handling."""
    # Precondition errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    EXTRACTOR_REGISTRATION_FAILED = "EXTRACTOR_REGISTRATION_FAILED"

    # Per-item extraction errors
    EXTRACTION_FAILED = "EXTRACTION_FAILED"
    EXTRACTION_TIMEOUT = "EXTRACTION_TIMEOUT"
    EXTRACTION_NETWORK_ERROR = "EXTRACTION_NETWORK_ERROR"
    EXTRACTION_PARSING_ERROR = "EXTRACTION_PARSING_ERROR"
    EXTRACTION_HTTP_ERROR = "EXTRACTION_HTTP_ERROR"

    # Output stage errors
    OUTPUT_WRITE_FAILED = "OUTPUT_WRITE_FAILED"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class BaseAppException(Exception):
    """Base exception with error classification and retry information."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        retryable: bool = False
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging and serialization."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
            "retryable": self.retryable,
            "type": self.__class__.__name__
        }


# Precondition Errors
class ValidationError(BaseAppException):
    """Raised when the invocation or its inputs are invalid."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR,
            message=message,
            details=details,
            retryable=False
        )


class ExtractorRegistrationError(BaseAppException):
    """Raised when a custom extractor cannot be loaded or registered."""

    def __init__(self, reference: str, reason: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ErrorCode.EXTRACTOR_REGISTRATION_FAILED,
            message=f"Cannot register custom extractor {reference}: {reason}",
            details=details or {"reference": reference},
            retryable=False
        )


# Extraction Errors
class ExtractionError(BaseAppException):
    """Base exception for article extraction failures."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, retryable: bool = True):
        super().__init__(
            code=ErrorCode.EXTRACTION_FAILED,
            message=message,
            details=details,
            retryable=retryable
        )


class ExtractionTimeoutError(ExtractionError):
    """Raised when article extraction times out."""

    def __init__(self, url: str, timeout: float, details: Optional[Dict[str, Any]] = None):
        message = f"Extraction timed out after {timeout:g}s"
        super().__init__(
            message=message,
            details=details or {"url": url, "timeout": timeout},
            retryable=True
        )
        self.code = ErrorCode.EXTRACTION_TIMEOUT


class ExtractionParsingError(ExtractionError):
    """Raised when article content cannot be parsed."""

    def __init__(self, url: str, reason: str = "no article content found", details: Optional[Dict[str, Any]] = None):
        message = f"Failed to parse article content: {reason}"
        super().__init__(
            message=message,
            details=details or {"url": url},
            retryable=False
        )
        self.code = ErrorCode.EXTRACTION_PARSING_ERROR


class ExtractionNetworkError(ExtractionError):
    """Raised when network-related extraction errors occur."""

    def __init__(self, url: str, reason: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"Network error: {reason}",
            details=details or {"url": url},
            retryable=True
        )
        self.code = ErrorCode.EXTRACTION_NETWORK_ERROR


class ExtractionHTTPError(ExtractionError):
    """Raised when the server rejects the request with a permanent client error."""

    def __init__(self, url: str, status_code: int, reason: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"HTTP {status_code}: {reason}",
            details=details or {"url": url, "status_code": status_code},
            retryable=False
        )
        self.code = ErrorCode.EXTRACTION_HTTP_ERROR
        self.status_code = status_code


# Output Errors
class OutputWriteError(BaseAppException):
    """Raised when an output file cannot be written."""

    def __init__(self, path: str, reason: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ErrorCode.OUTPUT_WRITE_FAILED,
            message=f"Failed to write {path}: {reason}",
            details=details or {"path": path},
            retryable=False
        )


# Generic Errors
class InternalError(BaseAppException):
    """Raised for unexpected internal errors."""

    def __init__(self, message: str = "Internal error", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ErrorCode.INTERNAL_ERROR,
            message=message,
            details=details,
            retryable=False
        )
