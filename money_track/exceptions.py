"""Domain-specific exceptions for the Money Track core."""

class ValidationError(ValueError):
    """Raised when user-supplied data does not meet validation requirements."""


class RecordNotFoundError(LookupError):
    """Raised when a transaction, budget, goal or category cannot be located."""


class PersistenceError(IOError):
    """Raised when the persistence layer encounters unrecoverable issues."""
