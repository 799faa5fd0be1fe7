"""
posts/service.py -- Create, read, update and delete posts behind a per-post password.

Lifecycle of a post: Nonexistent -> Active -> Nonexistent. Delete is
permanent; there is no soft delete.

Update and delete share one gate:
  1. look the post up           -> POST_NOT_FOUND if absent
  2. compare the given password -> PASSWORD_MISMATCH unless exactly equal
  3. only then write

so a wrong password never touches the stored row.

Post passwords are compared in plaintext, unlike account passwords (see
DESIGN.md, "Post passwords").
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from core.results import ErrorKind, Failure, Result, Success, invalid_input
from posts.models import AUTHOR_MAX_LENGTH, TITLE_MAX_LENGTH, Post
from posts.store import PostStore

logger = logging.getLogger("postboard.posts")

_NOT_FOUND_MESSAGE = "Post not found."
_MISMATCH_MESSAGE = "Password does not match."


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def validate_post_fields(title, author, password, content) -> dict[str, str]:
    """Return a field -> message map for missing or oversized post fields."""
    errors: dict[str, str] = {}
    if _blank(title):
        errors["title"] = "Title is required."
    elif len(title) > TITLE_MAX_LENGTH:
        errors["title"] = f"Title cannot exceed {TITLE_MAX_LENGTH} characters."
    if _blank(author):
        errors["author"] = "Author is required."
    elif len(author) > AUTHOR_MAX_LENGTH:
        errors["author"] = f"Author cannot exceed {AUTHOR_MAX_LENGTH} characters."
    if _blank(password):
        errors["password"] = "Password is required."
    if _blank(content):
        errors["content"] = "Content is required."
    return errors


class PostService:
    def __init__(self, store: PostStore) -> None:
        self._store = store

    def create(self, title: str, author: str, password: str, content: str) -> Result[Post]:
        errors = validate_post_fields(title, author, password, content)
        if errors:
            return invalid_input(errors)
        saved = self._store.save(
            Post(title=title, author=author, password=password, content=content, write_date=_now_iso())
        )
        logger.info("Post %d created by %r", saved.id, saved.author)
        return Success(saved)

    def list(self, title_contains: Optional[str] = None) -> list[Post]:
        """All posts, newest write_date first. Optionally filtered by a title fragment."""
        if title_contains:
            return self._store.find_all_by_title_containing(title_contains)
        return self._store.find_all_order_by_write_date_desc()

    def get_by_id(self, post_id: int) -> Result[Post]:
        post = self._store.find_by_id(post_id)
        if post is None:
            return Failure(ErrorKind.POST_NOT_FOUND, _NOT_FOUND_MESSAGE)
        return Success(post)

    def update(self, post_id: int, title: str, author: str, password: str, content: str) -> Result[Post]:
        """Overwrite title, author and content of a post whose password matches.

        password and write_date are never changed by an update.
        """
        gate = self._unlock(post_id, password)
        if isinstance(gate, Failure):
            return gate
        errors = validate_post_fields(title, author, password, content)
        if errors:
            return invalid_input(errors)

        post = gate.value
        post.title, post.author, post.content = title, author, content
        try:
            saved = self._store.save(post)
        except LookupError:
            # Deleted between the lookup and the write.
            return Failure(ErrorKind.POST_NOT_FOUND, _NOT_FOUND_MESSAGE)
        logger.info("Post %d updated", saved.id)
        return Success(saved)

    def delete(self, post_id: int, password: str) -> Result[int]:
        """Permanently remove a post whose password matches. Returns the deleted id."""
        gate = self._unlock(post_id, password)
        if isinstance(gate, Failure):
            return gate
        if not self._store.delete_by_id(post_id):
            return Failure(ErrorKind.POST_NOT_FOUND, _NOT_FOUND_MESSAGE)
        logger.info("Post %d deleted", post_id)
        return Success(post_id)

    def _unlock(self, post_id: int, password: Optional[str]) -> Result[Post]:
        found = self.get_by_id(post_id)
        if isinstance(found, Failure):
            return found
        if password is None or found.value.password != password:
            logger.warning("Rejected change to post %d: password mismatch", post_id)
            return Failure(ErrorKind.PASSWORD_MISMATCH, _MISMATCH_MESSAGE)
        return found
