"""Unit tests for posts/service.py -- the password-gated post lifecycle.

Covers:
- create() stamps write_date and validates required fields / lengths
- list() is ordered by write_date descending; a new post lands at index 0
- update()/delete() with a wrong password fail and leave the record unchanged
- update() never changes password or write_date
- missing ids -> POST_NOT_FOUND
- the create -> read -> bad update -> update -> delete -> not found scenario
"""

from __future__ import annotations

import pytest

from core.results import ErrorKind, Failure, Success
from posts.service import PostService
from posts.store import PostStore


def _create(service: PostService, title: str = "T", password: str = "p1"):
    result = service.create(title, "A", password, "C")
    assert isinstance(result, Success)
    return result.value


class TestCreate:
    def test_create_stamps_write_date(self, post_service: PostService) -> None:
        post = _create(post_service)
        assert post.id is not None
        assert post.write_date

    @pytest.mark.parametrize(
        "fields, bad_field",
        [
            (("", "A", "p1", "C"), "title"),
            (("T", "   ", "p1", "C"), "author"),
            (("T", "A", None, "C"), "password"),
            (("T", "A", "p1", ""), "content"),
            (("x" * 201, "A", "p1", "C"), "title"),
            (("T", "y" * 101, "p1", "C"), "author"),
        ],
    )
    def test_create_rejects_invalid_fields(
        self, post_service: PostService, post_store: PostStore, fields, bad_field: str
    ) -> None:
        result = post_service.create(*fields)
        assert isinstance(result, Failure)
        assert result.kind is ErrorKind.INVALID_INPUT
        assert bad_field in result.field_errors
        assert post_store.find_all_order_by_write_date_desc() == []

    def test_create_accepts_boundary_lengths(self, post_service: PostService) -> None:
        result = post_service.create("x" * 200, "y" * 100, "p1", "C")
        assert isinstance(result, Success)


class TestList:
    def test_list_sorted_by_write_date_desc(self, post_service: PostService) -> None:
        for i in range(5):
            _create(post_service, title=f"post {i}")
        dates = [p.write_date for p in post_service.list()]
        assert dates == sorted(dates, reverse=True)

    def test_new_post_moves_to_front(self, post_service: PostService) -> None:
        _create(post_service, title="old one")
        _create(post_service, title="old two")
        assert post_service.list()[0].title == "old two"
        fresh = _create(post_service, title="fresh")
        assert post_service.list()[0].id == fresh.id

    def test_list_filtered_by_title(self, post_service: PostService) -> None:
        _create(post_service, title="about python")
        _create(post_service, title="about java")
        assert [p.title for p in post_service.list(title_contains="python")] == ["about python"]


class TestPasswordGate:
    def test_update_wrong_password_leaves_record(self, post_service: PostService) -> None:
        post = _create(post_service)
        result = post_service.update(post.id, "T2", "A2", "wrong", "C2")
        assert isinstance(result, Failure)
        assert result.kind is ErrorKind.PASSWORD_MISMATCH
        assert post_service.get_by_id(post.id).value == post

    def test_update_password_is_exact_match(self, post_service: PostService) -> None:
        post = _create(post_service, password="Secret")
        for attempt in ("secret", "Secret ", " Secret", None):
            result = post_service.update(post.id, "T2", "A", attempt, "C")
            assert isinstance(result, Failure)
            assert result.kind is ErrorKind.PASSWORD_MISMATCH

    def test_update_keeps_password_and_write_date(self, post_service: PostService) -> None:
        post = _create(post_service)
        result = post_service.update(post.id, "T2", "A2", "p1", "C2")
        assert isinstance(result, Success)
        updated = result.value
        assert (updated.title, updated.author, updated.content) == ("T2", "A2", "C2")
        assert updated.password == "p1"
        assert updated.write_date == post.write_date

    def test_update_invalid_fields_after_unlock(self, post_service: PostService) -> None:
        post = _create(post_service)
        result = post_service.update(post.id, "", "A", "p1", "C")
        assert isinstance(result, Failure)
        assert result.kind is ErrorKind.INVALID_INPUT
        assert post_service.get_by_id(post.id).value.title == "T"

    def test_delete_wrong_password_leaves_record(self, post_service: PostService) -> None:
        post = _create(post_service)
        result = post_service.delete(post.id, "wrong")
        assert isinstance(result, Failure)
        assert result.kind is ErrorKind.PASSWORD_MISMATCH
        assert post_service.get_by_id(post.id).value == post

    @pytest.mark.parametrize("action", ["get", "update", "delete"])
    def test_missing_post(self, post_service: PostService, action: str) -> None:
        if action == "get":
            result = post_service.get_by_id(999)
        elif action == "update":
            result = post_service.update(999, "T", "A", "p1", "C")
        else:
            result = post_service.delete(999, "p1")
        assert isinstance(result, Failure)
        assert result.kind is ErrorKind.POST_NOT_FOUND


def test_post_lifecycle_scenario(post_service: PostService) -> None:
    created = post_service.create("T", "A", "p1", "C").value
    assert post_service.get_by_id(created.id).value.title == "T"

    bad = post_service.update(created.id, "T2", "A", "wrong", "C")
    assert isinstance(bad, Failure) and bad.kind is ErrorKind.PASSWORD_MISMATCH
    assert post_service.get_by_id(created.id).value.title == "T"

    good = post_service.update(created.id, "T2", "A", "p1", "C")
    assert isinstance(good, Success)
    assert post_service.get_by_id(created.id).value.title == "T2"

    deleted = post_service.delete(created.id, "p1")
    assert isinstance(deleted, Success)
    assert deleted.value == created.id

    gone = post_service.get_by_id(created.id)
    assert isinstance(gone, Failure) and gone.kind is ErrorKind.POST_NOT_FOUND
    again = post_service.delete(created.id, "p1")
    assert isinstance(again, Failure) and again.kind is ErrorKind.POST_NOT_FOUND


# ---------------------------------------------------------------------------
# Concurrent delete between the password check and the write
# ---------------------------------------------------------------------------


class _RacingPostStore(PostStore):
    """Deletes the target row right before every write, as a concurrent request would."""

    def save(self, post):
        if post.id is not None:
            super().delete_by_id(post.id)
        return super().save(post)

    def delete_by_id(self, post_id: int) -> bool:
        super().delete_by_id(post_id)
        return super().delete_by_id(post_id)


@pytest.fixture
def racing_service():
    store = _RacingPostStore("sqlite:///:memory:")
    yield PostService(store)
    store.close()


class TestConcurrentDelete:
    def test_update_after_concurrent_delete(self, racing_service: PostService) -> None:
        post = _create(racing_service)
        result = racing_service.update(post.id, "T2", "A", "p1", "C")
        assert isinstance(result, Failure)
        assert result.kind is ErrorKind.POST_NOT_FOUND
        assert isinstance(racing_service.get_by_id(post.id), Failure)

    def test_delete_after_concurrent_delete(self, racing_service: PostService) -> None:
        post = _create(racing_service)
        result = racing_service.delete(post.id, "p1")
        assert isinstance(result, Failure)
        assert result.kind is ErrorKind.POST_NOT_FOUND
