"""
Content service - posts and comments behind the policy engine.

Every mutating operation follows the same shape:
    1. Look up whatever the decision needs (comment owner, fresh)
    2. decide() and enforce
    3. Run the store operation
"""

from __future__ import annotations

import logging
from datetime import datetime

from scribe.auth.capabilities import Action, Role
from scribe.auth.policies import decide
from scribe.core.errors import NotFound, ValidationFailure, store_errors
from scribe.core.models import Comment, Page, Post, UserIdentity
from scribe.core.utils import ensure_utc, utc_now
from scribe.services.pagination import paginate
from scribe.storage.base import ContentStore

logger = logging.getLogger(__name__)


class ContentService:
    """Posts and comments, with authorization applied."""

    def __init__(self, store: ContentStore):
        self.store = store

    # =========================================================================
    # Posts
    # =========================================================================

    async def create_post(
        self,
        identity: UserIdentity | None,
        title: str,
        content: str,
        posted_at: datetime | None = None,
    ) -> Post:
        """Admins only. The author is always the caller."""
        decide(identity, Action.CREATE_POST).enforce()

        with store_errors("create_post"):
            post = await self.store.create_post(
                username=identity.username,
                title=title,
                content=content,
                posted_at=_stamp(posted_at),
            )
        logger.info(f"Post {post.id} created by {identity.username}")
        return post

    async def edit_post(
        self,
        identity: UserIdentity | None,
        post_id: int,
        title: str,
        content: str,
    ) -> None:
        decide(identity, Action.EDIT_POST).enforce()

        with store_errors("edit_post"):
            updated = await self.store.update_post(post_id, title, content)
        if not updated:
            raise NotFound("Post not found")
        logger.info(f"Post {post_id} edited by {identity.username}")

    async def delete_post(self, identity: UserIdentity | None, post_id: int) -> None:
        """Deletes the post and its comments in one store operation."""
        decide(identity, Action.DELETE_POST).enforce()

        with store_errors("delete_post"):
            deleted = await self.store.delete_post_cascade(post_id)
        if not deleted:
            raise NotFound("Post not found")
        logger.info(f"Post {post_id} and its comments deleted by {identity.username}")

    async def list_posts(self, offset: int, page_size: int) -> Page[Post]:
        decide(None, Action.READ_PUBLIC).enforce()

        return await _page("list_posts", self.store.list_posts, offset, page_size)

    # =========================================================================
    # Comments
    # =========================================================================

    async def create_comment(
        self,
        identity: UserIdentity | None,
        post_id: int,
        content: str,
        posted_at: datetime | None = None,
    ) -> Comment:
        """Any authenticated caller. Ownership is stamped from the identity."""
        decide(identity, Action.CREATE_COMMENT).enforce()

        with store_errors("create_comment"):
            if await self.store.get_post(post_id) is None:
                raise NotFound("Post not found")
            comment = await self.store.create_comment(
                post_id=post_id,
                username=identity.username,
                content=content,
                posted_at=_stamp(posted_at),
            )
        logger.info(f"Comment {comment.id} on post {post_id} created by {identity.username}")
        return comment

    async def edit_comment(
        self,
        identity: UserIdentity | None,
        comment_id: int,
        content: str,
    ) -> None:
        owner = await self._comment_owner(identity, comment_id)
        decide(identity, Action.EDIT_COMMENT, owner).enforce()

        with store_errors("edit_comment"):
            updated = await self.store.update_comment(comment_id, content)
        if not updated:
            raise NotFound("Comment not found")
        logger.info(
            f"Comment {comment_id} edited by {identity.username} ({Role.of(identity).value})"
        )

    async def delete_comment(self, identity: UserIdentity | None, comment_id: int) -> None:
        owner = await self._comment_owner(identity, comment_id)
        decide(identity, Action.DELETE_COMMENT, owner).enforce()

        with store_errors("delete_comment"):
            deleted = await self.store.delete_comment(comment_id)
        if not deleted:
            raise NotFound("Comment not found")
        logger.info(
            f"Comment {comment_id} deleted by {identity.username} ({Role.of(identity).value})"
        )

    async def list_comments(self, post_id: int, offset: int, page_size: int) -> Page[Comment]:
        decide(None, Action.READ_PUBLIC).enforce()

        async def fetch(start: int, limit: int) -> list[Comment]:
            return await self.store.list_comments(post_id, start, limit)

        return await _page("list_comments", fetch, offset, page_size)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _comment_owner(self, identity: UserIdentity | None, comment_id: int) -> str | None:
        """
        Current owner of a comment, read straight from the store.

        Anonymous callers are turned away before the lookup so they cannot
        discover which comment ids exist.
        """
        if identity is None:
            return None
        with store_errors("get_comment"):
            comment = await self.store.get_comment(comment_id)
        if comment is None:
            raise NotFound("Comment not found")
        return comment.username


def _stamp(posted_at: datetime | None) -> datetime:
    return ensure_utc(posted_at) if posted_at is not None else utc_now()


async def _page(operation: str, fetch, offset: int, page_size: int) -> Page:
    async def guarded(start: int, limit: int):
        with store_errors(operation):
            return await fetch(start, limit)

    try:
        return await paginate(guarded, offset, page_size)
    except ValueError as e:
        raise ValidationFailure(str(e))
