"""
Error taxonomy.

Domain code raises these; only the API layer turns them into HTTP
responses, using ``status_code`` and ``detail``.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)


class ScribeError(Exception):
    """Base exception for every error the service reports to callers."""

    status_code: int = 500
    default_detail: str = "Internal server error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class Unauthenticated(ScribeError):
    """No identity where one is required."""

    status_code = 401
    default_detail = "Authentication required"


class Unauthorized(ScribeError):
    """Valid identity lacking the required role or ownership."""

    status_code = 403
    default_detail = "Not authorised"


class InvalidToken(ScribeError):
    """A bearer token was presented but is invalid, expired or malformed."""

    status_code = 403
    default_detail = "Invalid token"


class InvalidCredentials(ScribeError):
    """Login failed. Same message for unknown user and wrong password."""

    status_code = 400
    default_detail = "Invalid credentials"


class NotFound(ScribeError):
    status_code = 404
    default_detail = "Not found"


class ValidationFailure(ScribeError):
    """The store rejected a write (constraint violation, bad input)."""

    status_code = 400
    default_detail = "Validation failed"


class StoreUnavailable(ScribeError):
    """Unexpected store failure. The detail never leaks the cause."""

    status_code = 500
    default_detail = "Internal server error"


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """
    Wrap a store call so unexpected failures surface as StoreUnavailable.

    Errors that are already part of the taxonomy pass through untouched.
    """
    try:
        yield
    except ScribeError:
        raise
    except Exception as e:
        logger.exception(f"Store failure during {operation}")
        raise StoreUnavailable() from e
