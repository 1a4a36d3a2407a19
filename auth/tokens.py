"""
auth/tokens.py -- JWT session tokens and password hashing.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry id, username, role, iat and exp.
       TokenIssuer is constructed with the secret (from Settings.secret_key in
       production) so no module holds a hard-coded signing key. verify()
       raises AuthError(INVALID_TOKEN) on any failure; whether the token was
       expired, tampered with, or garbage is logged but not told to the caller.

  Passwords: bcrypt, used directly. The default cost is 10 rounds so hashes
       written by earlier deployments verify at the same speed as new ones.
       bcrypt only looks at the first 72 bytes of input; we cut there
       explicitly because bcrypt 5 raises instead of truncating.

  Stateless: there is no revocation list. A token is valid until exp no
       matter what happens server-side, and logout is a client concern.

Layer rule: no imports from api/ or inventory/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt

from auth.models import Claims, User
from core.errors import AuthError, AuthErrorKind

if TYPE_CHECKING:
    from auth.store import UserStore

logger = logging.getLogger("appliance_tracker.auth")

_ALGORITHM = "HS256"
_BCRYPT_MAX_BYTES = 72

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def _password_bytes(plain: str) -> bytes:
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(plain: str, rounds: int = 10) -> str:
    """Return a salted bcrypt hash of the given plaintext password."""
    return bcrypt.hashpw(_password_bytes(plain), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed stored hash counts as a mismatch rather than an error.
    """
    try:
        return bcrypt.checkpw(_password_bytes(plain), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


# ---------------------------------------------------------------------------
# Session tokens
# ---------------------------------------------------------------------------


class TokenIssuer:
    """Signs and verifies bearer tokens for authenticated sessions.

    Usage:
        issuer = TokenIssuer(settings.secret_key, settings.token_expire_seconds)
        token = issuer.issue(Claims(id=1, username="ana", role="admin"))
        claims = issuer.verify(token)
    """

    def __init__(self, secret_key: str, expire_seconds: int = 3600, algorithm: str = _ALGORITHM) -> None:
        self._secret_key = secret_key
        self.expire_seconds = expire_seconds
        self.algorithm = algorithm

    def issue(self, claims: Claims, issued_at: datetime | None = None) -> str:
        """Encode a signed JWT that expires expire_seconds after issued_at.

        issued_at defaults to now (UTC). Passing an earlier time produces a
        token that is already partway through its lifetime.
        """
        iat = issued_at or datetime.now(timezone.utc)
        payload = {
            "id": claims.id,
            "username": claims.username,
            "role": claims.role,
            "iat": iat,
            "exp": iat + timedelta(seconds=self.expire_seconds),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> Claims:
        """Decode and verify a JWT, returning its claims.

        Raises AuthError(INVALID_TOKEN) for a bad signature, an expired token,
        a malformed string, or a payload missing the identity claims.
        """
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self.algorithm])
        except JWTError as exc:
            logger.debug("Token rejected: %s", exc)
            raise AuthError(AuthErrorKind.INVALID_TOKEN, "Failed to authenticate token.") from exc
        if "id" not in payload or "role" not in payload:
            logger.debug("Token rejected: identity claims missing")
            raise AuthError(AuthErrorKind.INVALID_TOKEN, "Failed to authenticate token.")
        return Claims(id=payload["id"], username=payload.get("username", ""), role=payload["role"])


# ---------------------------------------------------------------------------
# Password login
# ---------------------------------------------------------------------------


def authenticate_user(store: UserStore, username: str, password: str) -> User:
    """Check a username/password pair and return the matching User.

    Raises AuthError(USER_NOT_FOUND) when no such user exists and
    AuthError(BAD_PASSWORD) when the password does not match. Each attempt is
    judged on its own; there is no lockout or attempt counter.
    """
    user = store.get_by_username(username)
    if user is None:
        raise AuthError(AuthErrorKind.USER_NOT_FOUND, "User not found.")
    if not verify_password(password, user.hashed_password):
        raise AuthError(AuthErrorKind.BAD_PASSWORD, "Incorrect password.")
    return user
