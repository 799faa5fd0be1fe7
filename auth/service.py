"""
auth/service.py -- Signup and login for user accounts.

AuthService owns the credential flow:

  signup:  validate -> uniqueness check -> bcrypt hash -> insert
  login:   presence check -> lookup -> bcrypt compare -> issue JWT

Every expected failure comes back as a Failure (see core/results.py); the
route layer decides the HTTP status. Input validation runs before the store
is touched, so a malformed signup never costs a database round trip.

Login keeps "no such user" and "wrong password" as distinct kinds, but the
unknown-user path still burns one bcrypt comparison so both take the same
time.

Layer rule: no imports from api/ or posts/.
"""

from __future__ import annotations

import logging
import re

from sqlalchemy.exc import IntegrityError

from auth.models import ROLE_ADMIN, ROLE_USER, ROLES, LoginResult, User, UserPublic
from auth.store import UserStore
from auth.tokens import burn_password_check, create_access_token, decode_access_token, hash_password, verify_password
from core.config import Settings
from core.results import ErrorKind, Failure, Result, Success, invalid_input

logger = logging.getLogger("postboard.auth")

USERNAME_PATTERN = re.compile(r"^[a-z0-9]{4,10}$")
PASSWORD_SYMBOLS = "@$!%*?&"
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*[0-9])(?=.*[@$!%*?&])[A-Za-z0-9@$!%*?&]{8,15}$")

USERNAME_RULE = "Username must be 4-10 characters of lowercase letters (a-z) and digits (0-9)."
PASSWORD_RULE = (
    "Password must be 8-15 characters and include an uppercase letter, a lowercase letter, "
    f"a digit, and one of {PASSWORD_SYMBOLS}; no other characters are allowed."
)


def validate_signup(username: str | None, password: str | None, role: str | None) -> dict[str, str]:
    """Return a field -> message map of policy violations (empty when valid)."""
    errors: dict[str, str] = {}
    if not username or not username.strip():
        errors["username"] = "Username is required."
    elif not USERNAME_PATTERN.fullmatch(username):
        errors["username"] = USERNAME_RULE
    if not password or not password.strip():
        errors["password"] = "Password is required."
    elif not PASSWORD_PATTERN.fullmatch(password):
        errors["password"] = PASSWORD_RULE
    if role is not None and role not in ROLES:
        errors["role"] = f"Role must be one of: {', '.join(ROLES)}."
    return errors


class AuthService:
    """Registers users and authenticates logins against a UserStore."""

    def __init__(self, store: UserStore, settings: Settings) -> None:
        self._store = store
        self._settings = settings

    def signup(self, username: str | None, password: str | None, role: str | None = None) -> Result[UserPublic]:
        errors = validate_signup(username, password, role)
        if errors:
            return invalid_input(errors)

        if self._store.exists_by_username(username):
            logger.info("Signup rejected: username %r already taken", username)
            return Failure(ErrorKind.DUPLICATE_USERNAME, "Username already exists.")

        new_user = User(username=username, hashed_password=hash_password(password), role=role or ROLE_USER)
        try:
            saved = self._store.save(new_user)
        except IntegrityError:
            # A concurrent signup for the same name won the race to the UNIQUE index.
            logger.info("Signup rejected: username %r created concurrently", username)
            return Failure(ErrorKind.DUPLICATE_USERNAME, "Username already exists.")

        logger.info("User %r signed up (id=%s, role=%s)", saved.username, saved.id, saved.role)
        return Success(UserPublic.from_user(saved))

    def login(self, username: str | None, password: str | None) -> Result[LoginResult]:
        errors: dict[str, str] = {}
        if not username:
            errors["username"] = "Username is required."
        if not password:
            errors["password"] = "Password is required."
        if errors:
            return invalid_input(errors)

        user = self._store.get_by_username(username)
        if user is None:
            burn_password_check(password)
            logger.info("Login failed for %r: unknown user", username)
            return Failure(ErrorKind.USER_NOT_FOUND, "User does not exist.")
        if not verify_password(password, user.hashed_password):
            logger.info("Login failed for %r: password mismatch", username)
            return Failure(ErrorKind.INVALID_CREDENTIALS, "Password does not match.")

        token = create_access_token(
            user.id,
            user.username,
            user.role,
            secret_key=self._settings.secret_key,
            expire_seconds=self._settings.token_expire_seconds,
        )
        logger.info("User %r logged in", user.username)
        return Success(LoginResult(username=user.username, role=user.role, token=token))

    def authenticate_token(self, token: str) -> UserPublic | None:
        """Resolve a bearer token to the account it names, or None.

        The token's role claim is not trusted on its own: the stored record
        is re-read so a role change takes effect immediately.
        """
        payload = decode_access_token(token, self._settings.secret_key)
        if payload is None:
            return None
        user = self._store.get_by_username(payload["sub"])
        if user is None:
            return None
        return UserPublic.from_user(user)

    def ensure_admin(self, username: str, password: str) -> Result[UserPublic]:
        """Make sure username names an ADMIN account.

        A free username gets a new ADMIN account. An existing USER account is
        promoted to ADMIN; its password is not reset.
        """
        existing = self._store.get_by_username(username)
        if existing is None:
            return self.signup(username, password, ROLE_ADMIN)
        if existing.role != ROLE_ADMIN:
            if not self._store.update_role(existing.id, ROLE_ADMIN):
                return Failure(ErrorKind.USER_NOT_FOUND, "User does not exist.")
            logger.warning("User %r promoted from %s to %s", username, existing.role, ROLE_ADMIN)
            existing = self._store.get_by_id(existing.id)
        return Success(UserPublic.from_user(existing))
