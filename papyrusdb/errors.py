"""Exception taxonomy for PapyrusDB.

Each error carries the HTTP status the request boundary answers with.
"""


class PapyrusError(Exception):
    """Base for all papyrusdb errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PapyrusError):
    """A required field is missing or malformed."""

    status_code = 400


class AuthenticationError(PapyrusError):
    """No bearer credentials were supplied."""

    status_code = 401


class ForbiddenError(PapyrusError):
    """Bearer credentials did not match the server key."""

    status_code = 403


class NotFoundError(PapyrusError):
    """The addressed note, task or category does not exist."""

    status_code = 404


class ConflictError(PapyrusError):
    """The operation clashes with current store state."""

    status_code = 409


class DeletedConflictError(ConflictError):
    """An add targeted a note or task id that is currently a tombstone."""


class StoreError(PapyrusError):
    """The backing store could not be opened or is not supported."""

    status_code = 500
