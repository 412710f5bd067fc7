"""Error taxonomy for the triage workflow.

Services raise these; the API layer translates them into HTTP responses.
None of them is retried automatically.
"""


class TriageError(Exception):
    """Base class for user-facing workflow failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TriageError):
    """Required intake fields are missing or malformed."""


class PersistenceError(TriageError):
    """Insert, update, fetch or blob upload against the store failed."""


class RemoteProcedureError(TriageError):
    """The remote triage function call failed as a unit."""

    def __init__(self, message: str, action: str):
        super().__init__(message)
        self.action = action


class NotFoundError(TriageError):
    """No stored record exists for the requested identifier."""
