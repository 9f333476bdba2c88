class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ConflictError(DomainError):
    """Raised when an action clashes with the current persisted state."""


class NotFoundError(DomainError):
    """Raised when a referenced class, session, student or teacher is missing."""


class TransientStoreError(DomainError):
    """Raised when the record store is unreachable or the connection drops."""
