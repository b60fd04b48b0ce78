"""
Application Errors

Domain exceptions raised by repositories and services.
The API layer maps them to HTTP status codes in main.py.
"""


class ReservesError(Exception):
    """Base class for all domain errors."""

    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class NotFoundError(ReservesError):
    """Referenced assignment, entity or user does not exist."""

    status_code = 404


class ConflictError(ReservesError):
    """Uniqueness violation, e.g. a second assignment for the same pair."""

    status_code = 409


class ValidationError(ReservesError):
    """Malformed input to an accessor or service call."""

    status_code = 422


class InvalidTransitionError(ValidationError):
    """Completion status change not allowed by the state machine."""


class PermissionDeniedError(ReservesError):
    status_code = 403


class TransientStoreError(ReservesError):
    """The underlying store call failed (timeout, lost connection, ...)."""

    status_code = 503
