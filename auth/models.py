"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors posts/models.py
-- dataclasses own domain shape; stores and services do the work.

Layer rule: no imports from api/ or posts/.
"""

from __future__ import annotations

from dataclasses import dataclass

ROLE_USER = "USER"
ROLE_ADMIN = "ADMIN"
ROLES = (ROLE_USER, ROLE_ADMIN)


@dataclass
class User:
    """An account that can log in and receive a token.

    hashed_password is the bcrypt hash; the plaintext is never stored.
    id and created_at are None until the store has written the record.
    """

    username: str
    hashed_password: str
    role: str = ROLE_USER
    id: int | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class UserPublic:
    """What may leave the service about a user. No password hash."""

    id: int
    username: str
    role: str

    @classmethod
    def from_user(cls, user: User) -> UserPublic:
        return cls(id=user.id, username=user.username, role=user.role)


@dataclass(frozen=True)
class LoginResult:
    username: str
    role: str
    token: str
