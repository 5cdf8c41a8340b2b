"""
Custom Exceptions

This module defines the exception hierarchy used across the service.

- InvalidInputError and GenerationError come from the code generator
- The remaining errors are raised by the service and persistence layers
- Endpoints translate them into HTTP responses
"""

from typing import Optional


class URLShortenerException(Exception):
    """Base exception for URL shortener service."""
    pass


class InvalidInputError(URLShortenerException):
    """Raised when the generator is asked for something it cannot produce."""
    pass


class GenerationError(URLShortenerException):
    """Raised when randomness or cipher setup fails during code generation."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(message)


class InvalidURLError(URLShortenerException):
    """Raised when URL validation fails."""

    def __init__(self, url: str, reason: str = "Invalid URL format"):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: {url}")


class ShortCodeNotFoundError(URLShortenerException):
    """Raised when a short code is not found in the database."""

    def __init__(self, short_code: str):
        self.short_code = short_code
        super().__init__(f"Short code '{short_code}' not found")


class LinkExpiredError(URLShortenerException):
    """Raised when a short code exists but its expiration has passed."""

    def __init__(self, short_code: str):
        self.short_code = short_code
        super().__init__(f"Short code '{short_code}' has expired")


class DuplicateShortCodeError(URLShortenerException):
    """Raised when a short code is already taken by a different URL."""

    def __init__(self, short_code: str):
        self.short_code = short_code
        super().__init__(f"Short code '{short_code}' is already in use")


class DatabaseError(URLShortenerException):
    """Raised when database operations fail."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")


class ConfigurationError(URLShortenerException):
    """Raised when settings validation reports at least one error."""
    pass
