class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class UnknownEventType(ValidationError):
    """Raised when an event tag is not part of the points table."""


class StateConflict(DomainError):
    """Raised when an operation does not fit the record's current state.

    Callers should re-query state instead of retrying.
    """


class DuplicateCheckIn(StateConflict):
    """Raised when the user already has an open attendance record."""


class RecordNotFound(StateConflict):
    """Raised when an attendance record id does not exist."""


class NotOwner(StateConflict):
    """Raised when a user acts on another user's attendance record."""


class AlreadyCheckedOut(StateConflict):
    """Raised when a record is no longer CHECKED_IN."""


class SchedulingFailure(DomainError):
    """Raised when reminders could not be scheduled or cancelled."""


class PersistenceFailure(DomainError):
    """Raised when the record store is unavailable."""
