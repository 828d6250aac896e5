"""Custom exceptions for Gemini API client."""
from typing import Optional


class GeminiClientError(Exception):
    """Base exception for all Gemini client errors."""
    pass


class GeminiAPIError(GeminiClientError):
    """Raised for Gemini API errors that should not be retried."""

    def __init__(self, message: str, status_code: int, response_body: Optional[str] = None):
        """
        Initialize API error.

        Args:
            message: Error message
            status_code: HTTP status code
            response_body: Response body from API
        """
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class GeminiOverloadedError(GeminiAPIError):
    """Raised when Gemini reports it is temporarily unavailable (HTTP 503).

    This is the only failure the report pipeline retries.
    """

    def __init__(self, message: str, response_body: Optional[str] = None):
        super().__init__(message, status_code=503, response_body=response_body)


class GeminiTimeoutError(GeminiClientError):
    """Raised when Gemini API request times out."""
    pass
