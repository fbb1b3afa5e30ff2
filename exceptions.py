"""Account layer exceptions."""


class AccountError(Exception):
    """Base class for account layer errors."""


class ValidationError(AccountError, ValueError):
    """Raised before any I/O when account data or a request is invalid."""


class StoreError(AccountError):
    """Raised when the database fails to run a statement.

    The driver or pool exception is kept as ``__cause__``.
    """
