"""Error taxonomy shared by services and the API layer."""


class BizledgerError(Exception):
    """Base class for application errors.

    ``public`` marks messages that are safe to show to clients in production.
    """

    status_code: int = 500
    public: bool = True

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BizledgerError):
    """Bad input: missing or invalid field."""

    status_code = 400


class NotFoundError(BizledgerError):
    """A referenced record does not exist."""

    status_code = 404


class StorageError(BizledgerError):
    """Constraint violation or I/O failure in the database."""

    status_code = 500
    public = False


class DuplicateError(StorageError):
    """A unique value (such as a category name) is already taken."""

    public = True


class ProviderError(BizledgerError):
    """The completion provider failed, timed out or is not configured.

    Always recovered locally with fallback text; never returned to clients.
    """

    status_code = 502
    public = False
