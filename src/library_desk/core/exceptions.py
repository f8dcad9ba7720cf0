from __future__ import annotations

class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class OutsideShiftWindow(ValidationError):
    """Raised when attendance is marked outside the shift's time window."""


class NotFoundError(DomainError):
    """Raised when the referenced row does not exist (anymore)."""


class ConflictError(DomainError):
    """Raised when the request collides with current state; re-fetch before retrying."""


class AlreadyBooked(ConflictError):
    """The user already holds a pending or booked seat for this shift/date."""


class SeatTaken(ConflictError):
    """The seat already has a confirmed booking for this shift/date."""


class AlreadyCheckedIn(ConflictError):
    """An open attendance session exists for this shift today."""


class ShiftAlreadyCompleted(ConflictError):
    """The shift was already checked in and out today."""


class DuplicateRequest(ConflictError):
    """A pending payment request already exists for the same target."""


class AuthError(DomainError):
    """Base class for identity problems; retrying needs new credentials."""


class AuthenticationError(AuthError):
    """Raised when login credentials are invalid or the account is not approved."""


class AuthorizationError(AuthError):
    """Raised when a user lacks permission for an action."""


class ConfigurationError(Exception):
    """Raised when backend credentials/settings are missing or malformed."""


class UnexpectedError(Exception):
    """Network/storage failure that is not a business rule violation."""


class DuplicateKeyError(Exception):
    """Raised by repositories when the store rejects a write on a unique key."""

    def __init__(self, message: str = "", *, key: str | None = None):
        super().__init__(message)
        self.key = key
