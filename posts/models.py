"""
posts/models.py -- Domain dataclass for posts.

Pure data container with zero logic. Validation and the password gate live
in posts/service.py; SQL lives in posts/store.py.
"""

from dataclasses import dataclass
from typing import Optional

TITLE_MAX_LENGTH = 200
AUTHOR_MAX_LENGTH = 100


@dataclass
class Post:
    """A submitted post.

    password is the per-post edit/delete secret. It is stored and compared
    as given (not hashed) and must never be serialized into a response.

    write_date is an ISO 8601 UTC timestamp stamped once at creation; edits
    leave it alone. id and write_date are empty until the store has written
    the record.
    """

    title: str
    author: str
    password: str
    content: str
    id: Optional[int] = None
    write_date: str = ""
