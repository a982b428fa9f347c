"""Application error taxonomy.

Three kinds of failure surface to API callers: the caller has no valid
session, the store rejected or failed an operation, or the input broke a
business rule (for example a payment split that does not add up).
"""


class CleaningTrackerError(Exception):
    """Base class for application errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotAuthenticatedError(CleaningTrackerError):
    """No active session for the request."""

    status_code = 401


class StoreOperationError(CleaningTrackerError):
    """A query or write against the database failed."""

    status_code = 503


class ValidationFailedError(CleaningTrackerError):
    """Input violates a business rule."""

    status_code = 422
