"""
Error taxonomy shared by the repository and the API layer.

Service functions raise these; the handlers registered in ``create_app``
turn them into JSON responses. Persistence errors never reach the client
as-is: they are logged and answered with a generic 500.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass

MISSING = "missing"
OUT_OF_RANGE = "out_of_range"
INVALID = "invalid"


@dataclass(frozen=True)
class FieldError:
    field: str
    code: str  # MISSING, OUT_OF_RANGE or INVALID
    message: str

    def as_dict(self) -> dict:
        return asdict(self)


class LinogError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(LinogError):
    status_code = 400
    message = "Validation failed"

    def __init__(self, errors: list[FieldError], message: str | None = None):
        super().__init__(message)
        self.errors = list(errors)

    def to_dict(self) -> dict:
        return {"error": self.message, "errors": [e.as_dict() for e in self.errors]}


class AuthenticationError(LinogError):
    """Missing token -> 401, present but invalid or expired -> 403."""

    status_code = 403
    message = "Authentication rejected"

    @classmethod
    def required(cls) -> "AuthenticationError":
        err = cls("Authentication required")
        err.status_code = 401
        return err


class NotFoundError(LinogError):
    status_code = 404
    message = "Not found"


class ConflictError(LinogError):
    status_code = 409
    message = "Conflict"


class StoreError(LinogError):
    status_code = 500
    message = "Internal server error"
