"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in inventory/models.py -- dataclasses own domain shape; stores and routes do
the work.

Layer rule: no imports from api/ or inventory/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered account.

    hashed_password is the bcrypt hash, never the plaintext. role is free-form
    text and may be None when the registration request left it out.
    """

    username: str
    hashed_password: str
    role: str | None = None
    id: int | None = None


@dataclass(frozen=True)
class Claims:
    """Identity carried inside a session token.

    Attached to request.state.session by the auth gate. role is carried but
    no route checks it.
    """

    id: int
    username: str
    role: str | None = None
