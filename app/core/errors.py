"""
Domain errors raised by the matching core.

Every error carries a human readable ``reason`` and the HTTP status the API
layer answers with. None of them is fatal: callers surface the kind and the
reason and carry on.
"""


class MatchingError(Exception):
    """Base class for recoverable errors of the matching core."""

    status_code = 400
    kind = "error"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class NotFoundError(MatchingError):
    """A referenced entity does not exist."""

    status_code = 404
    kind = "not_found"


class AuthorizationError(MatchingError):
    """The acting user has no rights over the entity."""

    status_code = 403
    kind = "forbidden"


class InvalidStateError(MatchingError):
    """The operation is not valid in the entity's current lifecycle state."""

    status_code = 409
    kind = "invalid_state"


class ConflictError(MatchingError):
    """A uniqueness rule was violated, usually by a concurrent request."""

    status_code = 409
    kind = "conflict"
