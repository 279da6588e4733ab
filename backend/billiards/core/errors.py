from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    VALIDATION = "VALIDATION_ERROR"
    NOT_FOUND = "RESOURCE_NOT_FOUND"
    DUPLICATE_RESOURCE = "DUPLICATE_RESOURCE"
    BUSINESS_RULE = "BUSINESS_RULE_VIOLATION"
    DATABASE = "DATABASE_ERROR"
    NO_PLAYERS_AVAILABLE = "NO_PLAYERS_AVAILABLE"


# One entry per kind; main.py refuses to start if a kind is missing here.
STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.DUPLICATE_RESOURCE: 409,
    ErrorKind.BUSINESS_RULE: 422,
    ErrorKind.DATABASE: 500,
    ErrorKind.NO_PLAYERS_AVAILABLE: 409,
}


class AppError(Exception):
    """Application failure tagged with an ErrorKind.

    Services raise it; the HTTP layer turns it into the JSON error envelope.
    """

    def __init__(self, kind: ErrorKind, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details or {}

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    def __repr__(self) -> str:
        return f"AppError(kind={self.kind.name}, message={self.message!r})"


def validation_error(message: str, field: Optional[str] = None, value: Any = None) -> AppError:
    return AppError(ErrorKind.VALIDATION, message, {"field": field, "value": value})


def not_found(resource: str, identifier: Any = None) -> AppError:
    msg = f"{resource} not found"
    if identifier is not None:
        msg += f" with identifier: {identifier}"
    return AppError(ErrorKind.NOT_FOUND, msg, {"resource": resource, "identifier": identifier})


def duplicate(resource: str, field: str, value: Any) -> AppError:
    return AppError(
        ErrorKind.DUPLICATE_RESOURCE,
        f"{resource} with {field} '{value}' already exists",
        {"resource": resource, "field": field, "value": value},
    )


def business_rule(message: str, rule: Optional[str] = None) -> AppError:
    return AppError(ErrorKind.BUSINESS_RULE, message, {"rule": rule})


def database_error(operation: str, original: Optional[BaseException] = None) -> AppError:
    return AppError(
        ErrorKind.DATABASE,
        f"Database operation failed: {operation}",
        {"operation": operation, "original_error": str(original) if original else None},
    )


def no_players_available() -> AppError:
    return AppError(ErrorKind.NO_PLAYERS_AVAILABLE, "No players available for payer rotation")
