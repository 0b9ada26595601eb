"""
Tests for the content service: policy enforcement around store calls.
"""

import asyncio
from datetime import datetime, timezone

import pytest

from scribe.core.errors import (
    NotFound,
    StoreUnavailable,
    Unauthenticated,
    Unauthorized,
    ValidationFailure,
)
from scribe.core.models import UserIdentity
from scribe.services.content import ContentService
from scribe.storage.local import InMemoryContentStore


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def store():
    return InMemoryContentStore()


@pytest.fixture
def service(store):
    return ContentService(store)


@pytest.fixture
def carol():
    return UserIdentity(id=3, username="carol", admin=False)


@pytest.fixture
def post(service, admin):
    return run(service.create_post(admin, "T", "C"))


class BrokenStore(InMemoryContentStore):
    async def list_posts(self, offset, limit):
        raise RuntimeError("connection reset")

    async def update_post(self, post_id, title, content):
        raise RuntimeError("connection reset")


# =============================================================================
# Posts
# =============================================================================


class TestPosts:
    def test_admin_creates_post_as_self(self, service, admin):
        post = run(service.create_post(admin, "T", "C"))
        assert post.username == "alice"

    def test_naive_datetime_treated_as_utc(self, service, admin):
        post = run(service.create_post(admin, "T", "C", datetime(2024, 5, 1, 8, 30)))
        assert post.posted_at == datetime(2024, 5, 1, 8, 30, tzinfo=timezone.utc)

    def test_user_cannot_create(self, service, user):
        with pytest.raises(Unauthorized):
            run(service.create_post(user, "T", "C"))

    def test_anonymous_cannot_create(self, service):
        with pytest.raises(Unauthenticated):
            run(service.create_post(None, "T", "C"))

    def test_edit(self, service, store, admin, post):
        run(service.edit_post(admin, post.id, "T2", "C2"))
        assert run(store.get_post(post.id)).title == "T2"

    def test_user_cannot_edit_or_delete(self, service, user, post):
        with pytest.raises(Unauthorized):
            run(service.edit_post(user, post.id, "T2", "C2"))
        with pytest.raises(Unauthorized):
            run(service.delete_post(user, post.id))

    def test_missing_post(self, service, admin):
        with pytest.raises(NotFound):
            run(service.edit_post(admin, 99, "T", "C"))
        with pytest.raises(NotFound):
            run(service.delete_post(admin, 99))

    def test_delete_cascades(self, service, store, admin, user, post):
        comment = run(service.create_comment(user, post.id, "hi"))
        run(service.delete_post(admin, post.id))
        assert run(store.get_comment(comment.id)) is None

    def test_list(self, service, admin):
        for i in range(3):
            run(service.create_post(admin, f"T{i}", "C"))
        page = run(service.list_posts(offset=0, page_size=2))
        assert len(page.items) == 2
        assert page.has_more is True

    def test_invalid_page_arguments(self, service):
        with pytest.raises(ValidationFailure):
            run(service.list_posts(offset=-1, page_size=2))


# =============================================================================
# Comments
# =============================================================================


class TestComments:
    def test_owner_is_caller(self, service, user, post):
        comment = run(service.create_comment(user, post.id, "hi"))
        assert comment.username == "bob"

    def test_anonymous_cannot_comment(self, service, post):
        with pytest.raises(Unauthenticated):
            run(service.create_comment(None, post.id, "hi"))

    def test_comment_on_missing_post(self, service, user):
        with pytest.raises(NotFound):
            run(service.create_comment(user, 99, "hi"))

    def test_owner_can_edit_and_delete(self, service, store, user, post):
        comment = run(service.create_comment(user, post.id, "hi"))
        run(service.edit_comment(user, comment.id, "edited"))
        assert run(store.get_comment(comment.id)).content == "edited"
        run(service.delete_comment(user, comment.id))
        assert run(store.get_comment(comment.id)) is None

    def test_admin_override(self, service, store, admin, user, post):
        comment = run(service.create_comment(user, post.id, "hi"))
        run(service.delete_comment(admin, comment.id))
        assert run(store.get_comment(comment.id)) is None

    def test_other_user_denied(self, service, user, carol, post):
        comment = run(service.create_comment(carol, post.id, "mine"))
        with pytest.raises(Unauthorized):
            run(service.edit_comment(user, comment.id, "hijacked"))
        with pytest.raises(Unauthorized):
            run(service.delete_comment(user, comment.id))

    def test_anonymous_edit_is_unauthenticated_even_for_missing_comment(self, service):
        with pytest.raises(Unauthenticated):
            run(service.edit_comment(None, 99, "x"))

    def test_missing_comment(self, service, user):
        with pytest.raises(NotFound):
            run(service.delete_comment(user, 99))

    def test_list_scoped_to_post(self, service, admin, user, post):
        other = run(service.create_post(admin, "Other", "C"))
        run(service.create_comment(user, post.id, "a"))
        run(service.create_comment(user, other.id, "b"))
        page = run(service.list_comments(post.id, offset=0, page_size=10))
        assert [c.content for c in page.items] == ["a"]
        assert page.has_more is False


# =============================================================================
# Store failures
# =============================================================================


class TestStoreFailures:
    def test_read_failure_is_opaque(self):
        service = ContentService(BrokenStore())
        with pytest.raises(StoreUnavailable) as exc:
            run(service.list_posts(offset=0, page_size=5))
        assert "connection reset" not in exc.value.detail
        assert exc.value.status_code == 500

    def test_write_failure_is_opaque(self, admin):
        service = ContentService(BrokenStore())
        with pytest.raises(StoreUnavailable):
            run(service.edit_post(admin, 1, "T", "C"))
