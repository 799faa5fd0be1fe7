"""
API request and response models for Postboard REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
posts/models.py, which own the internal domain representation. Route handlers
map between the two.

Request models are deliberately permissive (plain optional strings): the
field rules for usernames, passwords and post fields belong to the services,
which report violations as INVALID_INPUT with a per-field message map.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import LoginResult, UserPublic
from posts.models import Post

# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class SignupRequest(BaseModel):
    """Request body for POST /auth/signup. role defaults to USER when omitted."""

    username: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class SignupResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    role: str
    message: str = "Signup completed successfully."

    @classmethod
    def from_user(cls, user: UserPublic) -> "SignupResponse":
        return cls(id=user.id, username=user.username, role=user.role)


class LoginResponse(BaseModel):
    """Response for POST /auth/login. The token is also sent as Authorization: Bearer."""

    model_config = ConfigDict(frozen=True)

    username: str
    role: str
    token: str
    message: str = "Login completed successfully."

    @classmethod
    def from_result(cls, result: LoginResult) -> "LoginResponse":
        return cls(username=result.username, role=result.role, token=result.token)


class MeResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    role: str


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------


class PostRequest(BaseModel):
    """Request body for POST /posts and PUT /posts/{id}."""

    title: Optional[str] = None
    author: Optional[str] = None
    password: Optional[str] = None
    content: Optional[str] = None


class PostDeleteRequest(BaseModel):
    password: Optional[str] = None


class PostResponse(BaseModel):
    """A post as returned to clients. The post password is never included."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    title: str
    author: str
    content: str
    write_date: datetime = Field(alias="writeDate")

    @classmethod
    def from_post(cls, post: Post) -> "PostResponse":
        return cls(
            id=post.id,
            title=post.title,
            author=post.author,
            content=post.content,
            write_date=datetime.fromisoformat(post.write_date),
        )


# ---------------------------------------------------------------------------
# Errors / health
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx response.

    fieldErrors is present only for validation failures.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    status: int
    error: str
    message: str
    path: str
    fieldErrors: Optional[dict[str, str]] = None


class HealthResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
