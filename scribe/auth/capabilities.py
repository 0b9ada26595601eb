"""
Actions and roles.

This defines WHAT callers may attempt, not HOW we decide.
The deciding happens in policies.py.
"""

from __future__ import annotations

from enum import Enum

from scribe.core.models import UserIdentity


class Role(str, Enum):
    """Trust level of a caller."""

    ANONYMOUS = "anonymous"      # No token
    USER = "user"                # Any registered account
    ADMIN = "admin"              # Can manage posts, bypasses ownership

    @classmethod
    def of(cls, identity: UserIdentity | None) -> Role:
        if identity is None:
            return cls.ANONYMOUS
        return cls.ADMIN if identity.admin else cls.USER


class Action(str, Enum):
    """Everything a request can ask the content service to do."""

    CREATE_POST = "post.create"
    EDIT_POST = "post.edit"
    DELETE_POST = "post.delete"

    CREATE_COMMENT = "comment.create"
    EDIT_COMMENT = "comment.edit"
    DELETE_COMMENT = "comment.delete"

    READ_PUBLIC = "public.read"


# Admin-only actions
POST_ACTIONS: frozenset[Action] = frozenset({
    Action.CREATE_POST,
    Action.EDIT_POST,
    Action.DELETE_POST,
})

# Owner-or-admin actions
OWNED_COMMENT_ACTIONS: frozenset[Action] = frozenset({
    Action.EDIT_COMMENT,
    Action.DELETE_COMMENT,
})
