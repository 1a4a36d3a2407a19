"""
auth/store.py -- SQLAlchemy Core persistence layer for user accounts.

Pattern: Repository + Data Mapper (same as inventory/store.py).
UserStore is the repository; _row_to_user is the mapper. Route and dependency
code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

Uniqueness:
  The route layer checks get_by_username() before inserting, but the UNIQUE
  constraint on username is what actually guarantees one row per name. Two
  concurrent registrations can both pass the pre-check; the loser gets a
  DuplicateKeyError from create_user().

Schema: table and column names (usuarios, password) match the database file
the service has always written, so existing deployments keep their accounts.

Layer rule: no imports from api/ or inventory/.
"""

from __future__ import annotations

from sqlalchemy import Column, Integer, MetaData, Table, Text, select
from sqlalchemy.engine import Engine

from auth.models import User
from core.database import store_errors

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "usuarios",
    _metadata,
    Column("id", Integer, primary_key=True),
    Column("username", Text, nullable=False, unique=True),
    Column("password", Text, nullable=False),  # bcrypt hash
    Column("role", Text),
)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore(engine)
        store.create_user(User(username="ana", hashed_password=hash_password("secret"), role="admin"))
        user = store.get_by_username("ana")
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        with store_errors("create the users table"):
            _metadata.create_all(self.engine)

    def get_by_username(self, username: str) -> User | None:
        """Look up a user by exact username (case-sensitive). Returns None if not found."""
        with store_errors("look up the user"):
            with self.engine.connect() as conn:
                row = conn.execute(_users.select().where(_users.c.username == username)).fetchone()
        return _row_to_user(row) if row is not None else None

    def create_user(self, user: User) -> int:
        """Insert a new user and return its assigned database ID.

        Raises DuplicateKeyError if the username already exists, StoreError on
        any other write failure.
        """
        with store_errors("create the user"):
            with self.engine.connect() as conn:
                result = conn.execute(
                    _users.insert().values(
                        username=user.username,
                        password=user.hashed_password,
                        role=user.role,
                    )
                )
                conn.commit()
                return result.inserted_primary_key[0]

    def ping(self) -> bool:
        """Return True if the users table can be queried."""
        with store_errors("reach the users table"):
            with self.engine.connect() as conn:
                conn.execute(select(_users.c.id).limit(1)).fetchall()
        return True


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        username=row.username,
        hashed_password=row.password,
        role=row.role,
    )
