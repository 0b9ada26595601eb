"""
Core module - data models, errors and shared utilities.

This module contains:
- models: UserIdentity, UserRecord, Post, Comment, Page
- errors: the exception taxonomy mapped to HTTP status codes
- utils: time helpers
"""

from scribe.core.models import (
    Comment,
    Page,
    Post,
    UserIdentity,
    UserRecord,
    UserResponse,
)
from scribe.core.errors import (
    InvalidCredentials,
    InvalidToken,
    NotFound,
    ScribeError,
    StoreUnavailable,
    Unauthenticated,
    Unauthorized,
    ValidationFailure,
)

__all__ = [
    # Models
    "Comment",
    "Page",
    "Post",
    "UserIdentity",
    "UserRecord",
    "UserResponse",
    # Errors
    "InvalidCredentials",
    "InvalidToken",
    "NotFound",
    "ScribeError",
    "StoreUnavailable",
    "Unauthenticated",
    "Unauthorized",
    "ValidationFailure",
]
