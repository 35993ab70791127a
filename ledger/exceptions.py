"""Domain-specific exceptions for the ledger core services."""

class ValidationError(ValueError):
    """Raised when typed or posted input cannot become a ledger value."""


class RecordNotFoundError(LookupError):
    """Raised by the CLI and API when an account id matches no account.

    The service itself treats a missing account as a no-op.
    """


class PersistenceError(IOError):
    """Raised when a ledger file cannot be written."""
