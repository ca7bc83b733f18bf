"""Custom exception hierarchy for ab-ledger."""


class LedgerError(Exception):
    """Base exception for all ab-ledger errors."""


class ValidationError(LedgerError):
    """Raised when caller input violates a field constraint.

    Parameters
    ----------
    errors : dict[str, list[str]]
        Field name to list of human-readable messages.
    """

    def __init__(self, errors: dict[str, list[str]]) -> None:
        self.errors = errors
        fields = ", ".join(sorted(errors)) or "input"
        super().__init__(f"Invalid {fields}")


class EntityNotFoundError(LedgerError):
    """Raised when a referenced customer or labourer does not exist."""


class SubEntityNotFoundError(EntityNotFoundError):
    """Raised when a transaction or payment is missing under its parent."""


class ConflictError(LedgerError):
    """Raised when a transaction changed since the caller last read it."""


class StorageUnavailableError(LedgerError):
    """Raised when the document store cannot be reached."""


class ImportFormatError(LedgerError):
    """Raised when an import payload cannot be read at all."""


class ConfigurationError(LedgerError):
    """Raised when configuration is invalid or missing."""
