"""
Post and comment endpoints.

Handlers stay thin: resolve the caller, call the content service,
shape the JSON. Authorization lives in the service.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, ConfigDict, Field

from scribe.auth.policies import get_identity
from scribe.core.models import Page, UserIdentity
from scribe.services.content import ContentService

router = APIRouter(tags=["content"])


def get_content_service(request: Request) -> ContentService:
    return request.app.state.content_service


# =============================================================================
# Request Models
# =============================================================================


class CreatePostRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(min_length=1, max_length=300)
    content: str
    posted_at: datetime | None = Field(default=None, alias="datetime")
    # Accepted for older clients; the author is always the caller.
    username: str | None = None


class EditPostRequest(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    content: str


class CreateCommentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: str = Field(min_length=1)
    posted_at: datetime | None = Field(default=None, alias="datetime")
    post_id: int = Field(alias="postID")
    username: str | None = None  # ignored, see CreatePostRequest


class EditCommentRequest(BaseModel):
    content: str = Field(min_length=1)


def _dump(page: Page) -> list[dict]:
    return [item.model_dump(by_alias=True, mode="json") for item in page.items]


# =============================================================================
# Posts
# =============================================================================


@router.post("/post", status_code=201)
async def create_post(
    data: CreatePostRequest,
    identity: UserIdentity | None = Depends(get_identity),
    service: ContentService = Depends(get_content_service),
):
    post = await service.create_post(identity, data.title, data.content, data.posted_at)
    return {"message": "Post created", "postID": post.id}


@router.put("/post/edit", status_code=201)
async def edit_post(
    data: EditPostRequest,
    post_id: int = Query(alias="postID"),
    identity: UserIdentity | None = Depends(get_identity),
    service: ContentService = Depends(get_content_service),
):
    await service.edit_post(identity, post_id, data.title, data.content)
    return {"message": "Post updated"}


@router.delete("/post/delete", status_code=201)
async def delete_post(
    post_id: int = Query(alias="postID"),
    identity: UserIdentity | None = Depends(get_identity),
    service: ContentService = Depends(get_content_service),
):
    await service.delete_post(identity, post_id)
    return {"message": "Post deleted"}


@router.get("/posts")
async def list_posts(
    request: Request,
    offset: int = Query(default=0, ge=0),
    service: ContentService = Depends(get_content_service),
):
    page_size = request.app.state.settings.posts_page_size
    page = await service.list_posts(offset, page_size)
    return {"posts": _dump(page), "areThereMorePosts": page.has_more}


# =============================================================================
# Comments
# =============================================================================


@router.post("/comment", status_code=201)
async def create_comment(
    data: CreateCommentRequest,
    identity: UserIdentity | None = Depends(get_identity),
    service: ContentService = Depends(get_content_service),
):
    comment = await service.create_comment(identity, data.post_id, data.content, data.posted_at)
    return {"message": "Comment created", "commentID": comment.id}


@router.get("/comments")
async def list_comments(
    request: Request,
    post_id: int = Query(alias="postID"),
    offset: int = Query(default=0, ge=0),
    page_size: int | None = Query(default=None, alias="pageSize", ge=1),
    service: ContentService = Depends(get_content_service),
):
    settings = request.app.state.settings
    size = min(page_size or settings.comments_page_size, settings.comments_max_page_size)
    page = await service.list_comments(post_id, offset, size)
    return {"comments": _dump(page), "areThereMoreComments": page.has_more}


@router.put("/comment/edit", status_code=201)
async def edit_comment(
    data: EditCommentRequest,
    comment_id: int = Query(alias="commentID"),
    identity: UserIdentity | None = Depends(get_identity),
    service: ContentService = Depends(get_content_service),
):
    await service.edit_comment(identity, comment_id, data.content)
    return {"message": "Comment updated"}


@router.delete("/comment/delete", status_code=201)
async def delete_comment(
    comment_id: int = Query(alias="commentID"),
    identity: UserIdentity | None = Depends(get_identity),
    service: ContentService = Depends(get_content_service),
):
    await service.delete_comment(identity, comment_id)
    return {"message": "Comment deleted"}
