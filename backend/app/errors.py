"""
Domain errors raised by the student record stores.

Route handlers translate these into HTTP responses; stores never raise
HTTPException themselves.
"""


class StoreError(Exception):
    """Base class for every error a record store can raise."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StoreError):
    """A required field (name, usn, sem) is missing or blank."""


class ConflictError(StoreError):
    """Another record already uses the requested USN."""


class NotFoundError(StoreError):
    """No record exists for the given identifier."""


class BackendError(StoreError):
    """The underlying storage failed unexpectedly."""
