"""
api/routes/auth.py -- Registration and password login.

Routes:
  POST /registro  -- create an account (201); 400 if the username is taken
  POST /login     -- exchange username/password for a bearer token (200)

Both routes are public; they sit outside the session gate.

Registration race:
  The get_by_username() pre-check only saves a bcrypt round for the common
  duplicate case. Two concurrent requests can both pass it; the UNIQUE
  constraint then rejects the second insert with DuplicateKeyError, which is
  reported exactly like the pre-check failure.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, Response

from api.models import LoginRequest, LoginResponse, MessageResponse, RegisterRequest
from auth.models import Claims, User
from auth.store import UserStore
from auth.tokens import TokenIssuer, authenticate_user, hash_password
from core.config import get_settings
from core.errors import DuplicateKeyError, ValidationError

logger = logging.getLogger("appliance_tracker.auth")

router = APIRouter()

_DUPLICATE = "Username already registered."


@router.post("/registro", response_model=MessageResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> MessageResponse:
    """Create a user with a bcrypt-hashed password."""
    user_store: UserStore = request.app.state.user_store
    if user_store.get_by_username(body.username) is not None:
        raise ValidationError(_DUPLICATE)

    hashed = hash_password(body.password, rounds=get_settings().bcrypt_rounds)
    try:
        user_store.create_user(User(username=body.username, hashed_password=hashed, role=body.role))
    except DuplicateKeyError as exc:
        raise ValidationError(_DUPLICATE) from exc

    logger.info("Registered user %s (role=%s)", body.username, body.role)
    return MessageResponse(message="User registered successfully.")


@router.post("/login", response_model=LoginResponse)
def login(request: Request, response: Response, body: LoginRequest) -> LoginResponse:
    """Authenticate with username and password and return a signed token.

    Unknown usernames and wrong passwords both answer 401, with different
    messages. Tokens expire after Settings.token_expire_seconds.
    """
    user_store: UserStore = request.app.state.user_store
    issuer: TokenIssuer = request.app.state.tokens

    response.headers["Cache-Control"] = "no-store"
    user = authenticate_user(user_store, body.username, body.password)
    token = issuer.issue(Claims(id=user.id, username=user.username, role=user.role))
    logger.info("User %s logged in", user.username)
    return LoginResponse(token=token)
