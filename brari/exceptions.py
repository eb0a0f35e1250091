"""
Error taxonomy for the Brari Backend.

Every error carries the HTTP status code it is rendered with, so the API layer
can turn any of them into an ``{"error": message}`` response.
"""


class BrariError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class AuthError(BrariError):
    """Missing or wrong bearer token."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ValidationError(BrariError):
    """Missing, empty or malformed request input."""

    status_code = 400


class UpstreamServiceError(BrariError):
    """Language model call failed."""

    pass


class StoreError(BrariError):
    """Key-value store operation failed."""

    pass


class IngestionError(BrariError):
    """A step of the ingestion pipeline failed."""

    pass
