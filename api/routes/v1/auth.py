"""
api/routes/v1/auth.py -- Signup, login and identity endpoints.

Routes:
  POST /auth/signup  -- create an account; 201 with the public view
  POST /auth/login   -- password login; 200 with token in body and Authorization header
  GET  /auth/me      -- the account behind a bearer token (requires auth)

Status mapping (api/errors.py):
  INVALID_INPUT -> 400 with fieldErrors, DUPLICATE_USERNAME -> 409,
  USER_NOT_FOUND / INVALID_CREDENTIALS -> 401.

Login responses, successful or not, carry Cache-Control: no-store so the
token never lands in a shared cache.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.errors import failure_response
from api.models import LoginRequest, LoginResponse, MeResponse, SignupRequest, SignupResponse
from auth.dependencies import get_auth_service, get_current_user
from auth.models import UserPublic
from auth.service import AuthService
from core.results import Failure

# Auth policy:
# - POST /auth/signup: public
# - POST /auth/login:  public
# - GET  /auth/me:     requires a bearer token (get_current_user)
router = APIRouter()

_NO_STORE = {"Cache-Control": "no-store"}


@router.post("/auth/signup", response_model=SignupResponse, status_code=201)
def signup(
    request: Request,
    body: SignupRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Register a new account. The password is stored only as a bcrypt hash."""
    result = auth_service.signup(body.username, body.password, body.role)
    if isinstance(result, Failure):
        return failure_response(request, result)
    return SignupResponse.from_user(result.value)


@router.post("/auth/login", response_model=LoginResponse)
def login(
    request: Request,
    body: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Authenticate with username and password and issue a JWT."""
    result = auth_service.login(body.username, body.password)
    if isinstance(result, Failure):
        return failure_response(request, result, headers=_NO_STORE)

    payload = LoginResponse.from_result(result.value)
    return JSONResponse(
        status_code=200,
        content=payload.model_dump(),
        headers={"Authorization": f"Bearer {payload.token}", **_NO_STORE},
    )


@router.get("/auth/me", response_model=MeResponse)
def me(current_user: UserPublic = Depends(get_current_user)) -> MeResponse:
    """Return identity information for the bearer of the token."""
    return MeResponse(id=current_user.id, username=current_user.username, role=current_user.role)
