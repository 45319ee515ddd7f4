"""
Application error taxonomy.
Each error maps onto one HTTP status in the handlers registered by app.main.
"""
from fastapi import status


class LibraryError(Exception):
    """Base class for errors surfaced to API clients."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LibraryError):
    """Missing or malformed request parameter."""
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(LibraryError):
    """Referenced collection or image does not exist."""
    status_code = status.HTTP_404_NOT_FOUND


class StoreError(LibraryError):
    """Query or mutation failure reported by the backing store."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
