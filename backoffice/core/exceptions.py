"""
Error taxonomy shared by services and the API layer.

Each error carries the HTTP status the request layer answers with.
"""


class BackOfficeError(Exception):
    """Base class for errors raised by the back-office services."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BackOfficeError):
    """Missing or malformed input, raised before any transaction opens."""
    status_code = 400


class NotFoundError(BackOfficeError):
    """A referenced entity does not exist."""
    status_code = 404


class ConflictError(BackOfficeError):
    """The request contradicts stored state (duplicate name, paid invoice, ...)."""
    status_code = 409


class PersistenceError(BackOfficeError):
    """The transaction could not be committed."""
    status_code = 500
