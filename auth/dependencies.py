"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

get_auth_service() hands routes the AuthService built at startup (it lives on
app.state; see api/main.py create_app()).

get_current_user() reads an "Authorization: Bearer <token>" header, verifies
the JWT, and re-reads the account from the store. It raises HTTP 401 when any
step fails.

Layer rule: no imports from api/ or posts/.
  auth/dependencies.py may import from fastapi (for Depends/HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from auth.models import UserPublic
from auth.service import AuthService


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_current_user(request: Request, auth_service: AuthService = Depends(get_auth_service)) -> UserPublic:
    """Require a valid bearer token. Raises HTTP 401 otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(user: UserPublic = Depends(get_current_user)): ...
    """
    auth_header = request.headers.get("Authorization", "")
    token = auth_header[7:] if auth_header.startswith("Bearer ") else ""
    user = auth_service.authenticate_token(token) if token else None
    if user is None:
        raise HTTPException(
            status_code=401,
            detail="Authentication required.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
