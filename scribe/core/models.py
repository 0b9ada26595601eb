"""
Core data models for the scribe service.

Users, posts and comments as the stores hand them out, plus the
transient Page view produced by the pagination protocol.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field


T = TypeVar("T")


# =============================================================================
# Users
# =============================================================================


class UserIdentity(BaseModel):
    """
    Who a request acts as.

    This is exactly what gets embedded in a bearer token. It is frozen:
    a token keeps asserting the role it was issued with until it expires,
    even if the stored account changes afterwards.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    admin: bool = False


class UserRecord(BaseModel):
    """User stored in the credential store."""

    id: int
    username: str
    email: str | None = None
    password_hash: str
    admin: bool = False
    created_at: datetime

    def identity(self) -> UserIdentity:
        return UserIdentity(id=self.id, username=self.username, admin=self.admin)


class UserResponse(BaseModel):
    """User data returned to client (no sensitive fields)."""

    id: int
    username: str
    email: str | None = None
    admin: bool = False


# =============================================================================
# Content
# =============================================================================


class Post(BaseModel):
    """A blog post. Only administrators create them."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    username: str  # author, stamped from the creating identity
    title: str
    content: str
    posted_at: datetime = Field(alias="datetime")


class Comment(BaseModel):
    """
    A comment on a post.

    Owned by whoever's username it carries. Ownership is by value, so a
    renamed account would lose its comments.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: int
    username: str
    content: str
    posted_at: datetime = Field(alias="datetime")
    post_id: int = Field(alias="postID")


# =============================================================================
# Pagination
# =============================================================================


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of an ordered listing. Never persisted."""

    items: list[T] = field(default_factory=list)
    has_more: bool = False
