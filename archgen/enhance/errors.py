"""Exception classes for diagram enhancement."""

from ..errors import ArchgenError


class EnhancementError(ArchgenError):
    """Base exception for enhancement errors."""

    pass


class APIKeyMissingError(EnhancementError):
    """Raised when no API key is configured for the provider."""

    def __init__(self, message: str = "No AI API key configured"):
        super().__init__(message)


class APIError(EnhancementError):
    """Raised when the provider call fails."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class ResponseParseError(EnhancementError):
    """Raised when the model reply holds no valid diagram."""

    def __init__(self, message: str, raw_response: str | None = None):
        self.raw_response = raw_response
        super().__init__(message)
