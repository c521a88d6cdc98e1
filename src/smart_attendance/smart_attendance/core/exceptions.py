class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class DuplicateRecordError(DomainError):
    """Raised by a store when a (member, event) pair already has a record."""


class StoreError(Exception):
    """Raised when a durable store cannot complete an operation."""
