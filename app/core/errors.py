# ---
# File: app/core/errors.py
# Purpose: Error and warning taxonomy shared by the status core, the backend
#          data-access layer, and the HTTP routes.
# ---


class ValidationError(Exception):
    """
    Raised when an operation is rejected because of its input:
    a blank required field, a status outside the event's domain,
    a disallowed maintenance transition, or an unknown referenced id.

    Routes turn this into HTTP 422 with the message as `detail`.
    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field


class ConsistencyWarning(UserWarning):
    """
    Non-fatal: an update was appended to an event that was already in a
    terminal status. The append goes through; callers decide whether to
    ask the operator for confirmation.
    """


# ---
# Failures talking to the backend REST collaborator.
# ---
class BackendError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BackendSchemaError(BackendError):
    """The backend answered with a body that does not match the canonical schema."""


# ---
# Partial edits: an explicit null on a field that has no "unset" meaning is
# a missing required value, not "no change".
# ---
def reject_nulls(changes: dict, fields) -> None:
    for field in sorted(set(fields) & set(changes)):
        if changes[field] is None:
            raise ValidationError(f"{field} cannot be null", field=field)
