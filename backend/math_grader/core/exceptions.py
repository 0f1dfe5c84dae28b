"""
Exception types raised by the grading pipeline.
"""

from typing import Any, Dict, List, Optional


class GradingError(Exception):
    """Base class for all grading pipeline failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status_code,
            "message": self.message,
            "type": self.code or type(self).__name__,
        }


class ConfigurationError(GradingError):
    """The AI provider is not configured (no API key)."""


class InvalidGradingRequestError(GradingError):
    """The request carries no question, model solution or student image."""


class ImageResolutionError(GradingError):
    """An image reference could not be turned into something the provider accepts."""

    def __init__(self, message: str, reference: str):
        super().__init__(message)
        self.reference = reference


class RateLimitError(GradingError):
    """The provider kept answering 429 until retries ran out."""

    def __init__(
        self,
        message: str,
        *,
        retry_after: Optional[str] = None,
        attempts: int = 0,
    ):
        super().__init__(message, status_code=429, code="rate_limited")
        self.retry_after = retry_after
        self.attempts = attempts


class TransportError(GradingError):
    """Connection failure, timeout or non-429 HTTP error from the provider."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        response_body: Optional[str] = None,
    ):
        super().__init__(message, status_code=status_code, code=code)
        self.response_body = response_body


class GradingTimeoutError(TransportError):
    """A grading call exceeded the configured overall time limit."""

    def __init__(self, message: str):
        super().__init__(message, code="ETIMEDOUT")


class MalformedResponseError(GradingError):
    """The provider reply could not be parsed as a grading result."""

    def __init__(self, message: str, *, content: Optional[str] = None):
        super().__init__(message, code="malformed_response")
        self.content = content


class MissingRequiredFieldsError(MalformedResponseError):
    """The provider reply parsed as JSON but failed grading result validation."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []
