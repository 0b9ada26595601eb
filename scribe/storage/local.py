"""
In-memory storage implementations for development and tests.

These work without any external services. A single asyncio.Lock
serialises writes so multi-step operations (like cascade deletes) are
never observed half-done.
"""

from __future__ import annotations

import asyncio
import itertools
from datetime import datetime

from scribe.core.errors import ValidationFailure
from scribe.core.models import Comment, Post, UserRecord
from scribe.core.utils import utc_now
from scribe.storage.base import ContentStore, CredentialStore


def _newest_first(items, key):
    # sorted() is stable, so equal timestamps keep insertion order
    return sorted(items, key=key, reverse=True)


# =============================================================================
# In-Memory Credential Storage
# =============================================================================


class InMemoryCredentialStore(CredentialStore):
    """In-memory user storage for development."""

    def __init__(self):
        self._users: dict[int, UserRecord] = {}
        self._by_username: dict[str, int] = {}
        self._by_email: dict[str, int] = {}
        self._ids = itertools.count(1)
        self._lock = asyncio.Lock()

    async def create_user(
        self,
        username: str,
        email: str | None,
        password_hash: str,
        admin: bool = False,
    ) -> UserRecord:
        async with self._lock:
            if username in self._by_username:
                raise ValidationFailure("Username already registered")
            if email and email.lower() in self._by_email:
                raise ValidationFailure("Email already registered")

            user = UserRecord(
                id=next(self._ids),
                username=username,
                email=email.lower() if email else None,
                password_hash=password_hash,
                admin=admin,
                created_at=utc_now(),
            )
            self._users[user.id] = user
            self._by_username[user.username] = user.id
            if user.email:
                self._by_email[user.email] = user.id
            return user

    async def get_user(self, user_id: int) -> UserRecord | None:
        return self._users.get(user_id)

    async def get_by_identifier(self, identifier: str) -> UserRecord | None:
        user_id = self._by_username.get(identifier)
        if user_id is None:
            user_id = self._by_email.get(identifier.strip().lower())
        return self._users.get(user_id) if user_id is not None else None


# =============================================================================
# In-Memory Content Storage
# =============================================================================


class InMemoryContentStore(ContentStore):
    """In-memory post/comment storage for development."""

    def __init__(self):
        self._posts: dict[int, Post] = {}
        self._comments: dict[int, Comment] = {}
        self._post_ids = itertools.count(1)
        self._comment_ids = itertools.count(1)
        self._lock = asyncio.Lock()

    # -- Posts -----------------------------------------------------------------

    async def create_post(
        self,
        username: str,
        title: str,
        content: str,
        posted_at: datetime,
    ) -> Post:
        async with self._lock:
            post = Post(
                id=next(self._post_ids),
                username=username,
                title=title,
                content=content,
                posted_at=posted_at,
            )
            self._posts[post.id] = post
            return post

    async def get_post(self, post_id: int) -> Post | None:
        return self._posts.get(post_id)

    async def update_post(self, post_id: int, title: str, content: str) -> bool:
        async with self._lock:
            post = self._posts.get(post_id)
            if post is None:
                return False
            self._posts[post_id] = post.model_copy(update={"title": title, "content": content})
            return True

    async def delete_post_cascade(self, post_id: int) -> bool:
        async with self._lock:
            if post_id not in self._posts:
                return False
            self._comments = {
                cid: c for cid, c in self._comments.items() if c.post_id != post_id
            }
            del self._posts[post_id]
            return True

    async def list_posts(self, offset: int, limit: int) -> list[Post]:
        posts = _newest_first(self._posts.values(), key=lambda p: p.posted_at)
        return posts[offset:offset + limit]

    # -- Comments --------------------------------------------------------------

    async def create_comment(
        self,
        post_id: int,
        username: str,
        content: str,
        posted_at: datetime,
    ) -> Comment:
        async with self._lock:
            if post_id not in self._posts:
                raise ValidationFailure("Post does not exist")
            comment = Comment(
                id=next(self._comment_ids),
                username=username,
                content=content,
                posted_at=posted_at,
                post_id=post_id,
            )
            self._comments[comment.id] = comment
            return comment

    async def get_comment(self, comment_id: int) -> Comment | None:
        return self._comments.get(comment_id)

    async def update_comment(self, comment_id: int, content: str) -> bool:
        async with self._lock:
            comment = self._comments.get(comment_id)
            if comment is None:
                return False
            self._comments[comment_id] = comment.model_copy(update={"content": content})
            return True

    async def delete_comment(self, comment_id: int) -> bool:
        async with self._lock:
            return self._comments.pop(comment_id, None) is not None

    async def list_comments(self, post_id: int, offset: int, limit: int) -> list[Comment]:
        comments = _newest_first(
            (c for c in self._comments.values() if c.post_id == post_id),
            key=lambda c: c.posted_at,
        )
        return comments[offset:offset + limit]
