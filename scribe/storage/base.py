"""
Storage abstraction layer.

All persistence goes through these interfaces. This allows swapping
implementations (in-memory → SQLite → PostgreSQL) without changing
application code.

- CredentialStore → users (username, email, password hash, admin flag)
- ContentStore → posts and comments
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from pydantic import BaseModel

from scribe.core.models import Comment, Post, UserRecord


# =============================================================================
# Storage Interfaces
# =============================================================================


class CredentialStore(ABC):
    """
    Persistence for user accounts.

    Stores never hash passwords themselves; they receive and return the
    stored hash string.
    """

    @abstractmethod
    async def create_user(
        self,
        username: str,
        email: str | None,
        password_hash: str,
        admin: bool = False,
    ) -> UserRecord:
        """Insert a user. Raises ValidationFailure if username or email is taken."""
        pass

    @abstractmethod
    async def get_user(self, user_id: int) -> UserRecord | None:
        """Get a user by ID."""
        pass

    @abstractmethod
    async def get_by_identifier(self, identifier: str) -> UserRecord | None:
        """Get a user by username, or by email (case-insensitive)."""
        pass


class ContentStore(ABC):
    """
    Persistence for posts and comments.

    Listings are ordered by timestamp descending; ties keep insertion
    order. Comments reference posts by id only, so removing a post and
    its comments goes through delete_post_cascade.
    """

    # -- Posts -----------------------------------------------------------------

    @abstractmethod
    async def create_post(
        self,
        username: str,
        title: str,
        content: str,
        posted_at: datetime,
    ) -> Post:
        pass

    @abstractmethod
    async def get_post(self, post_id: int) -> Post | None:
        pass

    @abstractmethod
    async def update_post(self, post_id: int, title: str, content: str) -> bool:
        """Returns False if the post does not exist."""
        pass

    @abstractmethod
    async def delete_post_cascade(self, post_id: int) -> bool:
        """
        Delete a post and all its comments atomically.

        Returns False (and deletes nothing) if the post does not exist.
        """
        pass

    @abstractmethod
    async def list_posts(self, offset: int, limit: int) -> list[Post]:
        pass

    # -- Comments --------------------------------------------------------------

    @abstractmethod
    async def create_comment(
        self,
        post_id: int,
        username: str,
        content: str,
        posted_at: datetime,
    ) -> Comment:
        pass

    @abstractmethod
    async def get_comment(self, comment_id: int) -> Comment | None:
        pass

    @abstractmethod
    async def update_comment(self, comment_id: int, content: str) -> bool:
        pass

    @abstractmethod
    async def delete_comment(self, comment_id: int) -> bool:
        pass

    @abstractmethod
    async def list_comments(self, post_id: int, offset: int, limit: int) -> list[Comment]:
        pass


# =============================================================================
# Storage Provider (dependency injection container)
# =============================================================================


class StorageProvider(BaseModel):
    """
    Container for both storage backends.

    Initialize once at app startup with appropriate implementations.
    """

    model_config = {"arbitrary_types_allowed": True}

    credentials: CredentialStore
    content: ContentStore
