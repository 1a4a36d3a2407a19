"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Only one auth method exists: an Authorization: Bearer <token> header carrying
a JWT issued by POST /login.

require_session() is attached as a router-level dependency on the appliance
router, so every appliance route is gated before its handler (and therefore
before the store) runs.

Layer rule: no imports from api/ or inventory/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.models import Claims
from auth.tokens import TokenIssuer
from core.errors import AuthError, AuthErrorKind


def _bearer_token(request: Request) -> str | None:
    """Return the token part of the Authorization header.

    None means the header is absent or empty. A header that is present but
    not shaped like "Bearer <token>" yields "" so it is judged as an invalid
    token, not a missing one.
    """
    auth_header = request.headers.get("Authorization", "")
    if not auth_header:
        return None
    parts = auth_header.split(" ")
    return parts[1] if len(parts) > 1 else ""


def require_session(request: Request) -> Claims:
    """Require a valid bearer token. Attaches the claims to request.state.session.

    Raises AuthError(MISSING_TOKEN) without a header and
    AuthError(INVALID_TOKEN) when the token does not verify. The role claim
    is attached but not checked here or by any route.
    """
    token = _bearer_token(request)
    if token is None:
        raise AuthError(AuthErrorKind.MISSING_TOKEN, "No token provided.")
    issuer: TokenIssuer = request.app.state.tokens
    claims = issuer.verify(token)
    request.state.session = claims
    return claims
