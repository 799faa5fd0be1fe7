"""
posts/store.py -- SQLAlchemy-backed persistence layer for posts.

Uses SQLAlchemy Core (not ORM) so the Post dataclass in posts/models.py
remains the authoritative domain representation. Swapping SQLite for
PostgreSQL is a connection string change, not a rewrite.

Pattern: Repository + Data Mapper. PostStore is the repository (typed CRUD
methods, nothing else). _row_to_post is the mapper. Services never touch SQL
directly.

Atomicity: every write runs inside its own engine.begin() block, so a single
record is either fully written or not at all. Concurrent updates of the same
row are last-writer-wins.

Ordering: write_date is stored as a fixed-width ISO 8601 UTC string
(microsecond precision, +00:00 offset), so lexicographic order is
chronological order. Ties on write_date fall back to id, newest first.

Usage:
    store = PostStore("sqlite:///postboard.db")       # SQLite
    store = PostStore("postgresql://user:pw@host/db") # PostgreSQL
    post = store.save(Post(title="T", author="A", password="p1", content="C", write_date=now))
    posts = store.find_all_order_by_write_date_desc()
    store.delete_by_id(post.id)
    store.close()
"""

from typing import Optional

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event
from sqlalchemy.engine import Engine

from posts.models import AUTHOR_MAX_LENGTH, TITLE_MAX_LENGTH, Post

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_posts = Table(
    "posts",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(TITLE_MAX_LENGTH), nullable=False),
    Column("author", String(AUTHOR_MAX_LENGTH), nullable=False),
    Column("password", String(255), nullable=False),
    Column("content", Text, nullable=False),
    Column("write_date", String(32), nullable=False, index=True),
)

_NEWEST_FIRST = (_posts.c.write_date.desc(), _posts.c.id.desc())

# SQLite INTEGER is signed 64-bit; larger ids cannot name a stored row.
_MAX_ID = 2**63 - 1


def _storable_id(post_id: int) -> bool:
    return 0 < post_id <= _MAX_ID


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


class PostStore:
    """Repository for Post records."""

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def save(self, post: Post) -> Post:
        """Insert a new post (id is None) or update an existing one.

        On update only title, author and content are written; password and
        write_date are left as stored. Returns the record as it now stands
        in the database, or raises LookupError if an update targets a row
        that no longer exists.
        """
        with self.engine.begin() as conn:
            if post.id is None:
                if not post.write_date:
                    raise ValueError("write_date must be set before a post is inserted")
                result = conn.execute(
                    _posts.insert().values(
                        title=post.title,
                        author=post.author,
                        password=post.password,
                        content=post.content,
                        write_date=post.write_date,
                    )
                )
                post_id = result.inserted_primary_key[0]
            else:
                if not _storable_id(post.id):
                    raise LookupError(f"post {post.id} does not exist")
                result = conn.execute(
                    _posts.update()
                    .where(_posts.c.id == post.id)
                    .values(title=post.title, author=post.author, content=post.content)
                )
                if result.rowcount == 0:
                    raise LookupError(f"post {post.id} does not exist")
                post_id = post.id
            row = conn.execute(_posts.select().where(_posts.c.id == post_id)).fetchone()
        return _row_to_post(row)

    def delete_by_id(self, post_id: int) -> bool:
        """Permanently delete a post. Returns True if deleted, False if not found."""
        if not _storable_id(post_id):
            return False
        with self.engine.begin() as conn:
            result = conn.execute(_posts.delete().where(_posts.c.id == post_id))
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_by_id(self, post_id: int) -> Optional[Post]:
        if not _storable_id(post_id):
            return None
        with self.engine.connect() as conn:
            row = conn.execute(_posts.select().where(_posts.c.id == post_id)).fetchone()
        return _row_to_post(row) if row is not None else None

    def find_all_order_by_write_date_desc(self) -> list[Post]:
        with self.engine.connect() as conn:
            rows = conn.execute(_posts.select().order_by(*_NEWEST_FIRST)).fetchall()
        return [_row_to_post(r) for r in rows]

    def find_all_by_title_containing(self, fragment: str) -> list[Post]:
        """Posts whose title contains fragment, newest first.

        LIKE wildcards in fragment are escaped so "%" and "_" match literally.
        """
        escaped = fragment.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        with self.engine.connect() as conn:
            rows = conn.execute(
                _posts.select()
                .where(_posts.c.title.like(f"%{escaped}%", escape="\\"))
                .order_by(*_NEWEST_FIRST)
            ).fetchall()
        return [_row_to_post(r) for r in rows]

    def close(self) -> None:
        self.engine.dispose()


def _row_to_post(row) -> Post:
    return Post(
        id=row.id,
        title=row.title,
        author=row.author,
        password=row.password,
        content=row.content,
        write_date=row.write_date,
    )
