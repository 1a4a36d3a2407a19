"""
core/errors.py -- Domain exception taxonomy.

Stores and auth helpers raise these; api/main.py registers one exception
handler per class and turns each into a status code plus {"error": message}.
Nothing above the handler boundary catches them, and none of them is fatal to
the process.

Layer rule: core/ is the kernel. No imports from api/, auth/, or inventory/.
"""

from __future__ import annotations

from enum import Enum


class AppError(Exception):
    """Base class for every error the API maps to a JSON error response."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(AppError):
    """A request conflicts with existing data (e.g. username already taken)."""


class NotFoundError(AppError):
    """No record exists for the requested id."""


class StoreError(AppError):
    """The persistence layer failed (disk I/O, constraint violation, missing table)."""


class DuplicateKeyError(StoreError):
    """An insert violated a UNIQUE constraint."""


class AuthErrorKind(str, Enum):
    MISSING_TOKEN = "missing_token"
    INVALID_TOKEN = "invalid_token"
    USER_NOT_FOUND = "user_not_found"
    BAD_PASSWORD = "bad_password"


class AuthError(AppError):
    """Authentication failed.

    kind tells the handler which status to use. INVALID_TOKEN deliberately
    covers expired, tampered, and malformed tokens alike.
    """

    def __init__(self, kind: AuthErrorKind, message: str) -> None:
        self.kind = kind
        super().__init__(message)
