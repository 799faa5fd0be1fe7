"""
auth/tokens.py -- JWT and password hashing utilities.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with the configured
       SECRET_KEY and carry sub (username), user_id, role, and exp.
       Verification returns None on any failure -- callers turn that into 401.

  Passwords: bcrypt, used directly. Its cost factor makes brute-forcing
       low-entropy secrets expensive. _DUMMY_HASH lets AuthService.login()
       run a full bcrypt check even for unknown usernames, so response time
       does not reveal which usernames exist.

The signing key and expiry are passed in by the caller (AuthService holds
the Settings) rather than read from a module-level global.

Layer rule: no imports from api/ or posts/.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

ALGORITHM = "HS256"

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    bcrypt only looks at the first 72 bytes. Signup caps passwords at 15
    characters, well under the limit.
    """
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed stored hash counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


# Computed once at import so the first login is not measurably slower than the rest.
_DUMMY_HASH: str = hash_password("postboard_timing_dummy")


def burn_password_check(plain: str) -> None:
    """Run a bcrypt comparison whose result is discarded (timing equalization)."""
    verify_password(plain, _DUMMY_HASH)


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(user_id: int, username: str, role: str, secret_key: str, expire_seconds: int) -> str:
    """Encode a signed JWT with user identity and expiry.

    Args:
        user_id:        Numeric user ID stored in the DB.
        username:       Stored as the JWT subject claim.
        role:           "USER" or "ADMIN".
        secret_key:     HMAC signing key (Settings.secret_key).
        expire_seconds: Token lifetime (Settings.token_expire_seconds).
    """
    expire = datetime.now(timezone.utc) + timedelta(seconds=expire_seconds)
    payload = {
        "sub": username,
        "user_id": user_id,
        "role": role,
        "exp": expire,
    }
    return jwt.encode(payload, secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str, secret_key: str) -> dict | None:
    """Decode and verify a JWT. Returns the payload dict or None on any failure.

    Expired tokens, bad signatures, and payloads missing sub/role all come
    back as None.
    """
    try:
        payload = jwt.decode(token, secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if not payload.get("sub") or "role" not in payload:
        return None
    return payload
