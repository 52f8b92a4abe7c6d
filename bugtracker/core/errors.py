# bugtracker/core/errors.py
"""Domain error taxonomy shared by the service layer and the HTTP handlers."""
import functools
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


class BugTrackerError(Exception):
    status_code = 500
    message = "Server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(BugTrackerError):
    status_code = 400
    message = "Validation failed"

    def __init__(self, errors: list[FieldError], message: str | None = None):
        super().__init__(message)
        self.errors = list(errors)

    def __str__(self) -> str:
        return "; ".join(f"{e.field}: {e.message}" for e in self.errors) or self.message


class NotFound(BugTrackerError):
    status_code = 404
    message = "Bug not found"


class InvalidIdentifier(BugTrackerError):
    status_code = 400
    message = "Invalid bug ID format"


class PersistenceFailure(BugTrackerError):
    status_code = 500
    message = "Server error"


def persistence_guard(message: str):
    """Wrap an async service method so storage errors surface as PersistenceFailure."""

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except SQLAlchemyError as exc:
                raise PersistenceFailure(message) from exc

        return wrapper

    return decorator


__all__ = [
    "FieldError",
    "BugTrackerError",
    "ValidationError",
    "NotFound",
    "InvalidIdentifier",
    "PersistenceFailure",
    "persistence_guard",
]
