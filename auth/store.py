"""
auth/store.py -- Account persistence on SQLAlchemy Core.

UserStore is the repository for accounts and _row_to_user maps rows back to
the User dataclass, the same split tours/store.py uses. Handlers and
dependencies go through UserStore and never build SQL themselves.

Uniqueness: the schema declares both username and email UNIQUE. Registration
looks both up first, so the constraints only trip when two sign-ups race for
the same name; auth/credentials.py reports that IntegrityError as a Conflict.

Every statement binds its parameters; nothing is interpolated into SQL.

Layer rule: no imports from api/ or tours/.
"""

from __future__ import annotations

from sqlalchemy import Column, MetaData, String, Table, Text, func, select, text

from auth.models import User
from core.db import now_iso, open_engine
from core.ids import new_object_id

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", String(24), primary_key=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
)


class UserStore:
    """Repository for User accounts.

    Usage:
        store = UserStore("sqlite:///:memory:")
        user_id = store.create_user(User(username="kesav", email="k@x.com", hashed_password=hash_password("pw")))
        user = store.get_by_email("k@x.com")
        store.close()
    """

    def __init__(self, db_url: str | None = None) -> None:
        self.engine = open_engine(_metadata, db_url)

    def create_user(self, user: User) -> str:
        """Insert a new account and return the id assigned to it.

        Raises sqlalchemy.exc.IntegrityError when the username or email is
        taken; the insert is rolled back and nothing is stored.
        """
        user_id = new_object_id()
        row = {
            "id": user_id,
            "username": user.username,
            "email": user.email,
            "hashed_password": user.hashed_password,
            "created_at": now_iso(),
        }
        with self.engine.begin() as conn:
            conn.execute(_users.insert(), row)
        return user_id

    def _fetch_one(self, column, value) -> User | None:
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(column == value)).first()
        return None if row is None else _row_to_user(row)

    def get_by_id(self, user_id: str) -> User | None:
        return self._fetch_one(_users.c.id, user_id)

    def get_by_email(self, email: str) -> User | None:
        """Exact, case-sensitive email match."""
        return self._fetch_one(_users.c.email, email)

    def get_by_username(self, username: str) -> User | None:
        """Exact, case-sensitive username match."""
        return self._fetch_one(_users.c.username, username)

    def list_users(self) -> list[User]:
        """Every account, sorted by username."""
        with self.engine.connect() as conn:
            rows = conn.execute(_users.select().order_by(_users.c.username)).all()
        return [_row_to_user(r) for r in rows]

    def count_users(self) -> int:
        with self.engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(_users)).scalar_one()

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1

    def close(self) -> None:
        self.engine.dispose()


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        username=row.username,
        email=row.email,
        hashed_password=row.hashed_password,
        created_at=row.created_at,
    )
