"""Repository for the ``users`` table."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Union

from userdb.db.connection import Connection
from userdb.db.schema import USERS_TABLE
from userdb.models.user import User

logger = logging.getLogger(__name__)

UserLike = Union[User, tuple[str, Optional[int]]]


def _as_params(user: UserLike) -> tuple[str, Optional[int]]:
    if isinstance(user, User):
        return user.name, user.age
    name, age = user
    return name, age


class UserRepository:
    """
    Parameterized CRUD against ``users``.

    Errors are not caught here: ``ConstraintViolation`` and ``QueryError``
    propagate to the transaction coordinator or the caller.
    """

    def __init__(self, conn: Connection):
        self._conn = conn

    @property
    def _table(self) -> str:
        return self._conn.qualify(USERS_TABLE)

    # -- Create ----------------------------------------------------------------

    def insert_one(self, name: str, age: Optional[int] = None) -> int:
        """Insert one user and return the id the store assigned.

        ``age=None`` binds as NULL. Raises ``ConstraintViolation`` on a
        duplicate name.
        """
        _, new_id = self._conn.execute(
            f"INSERT INTO {self._table} (name, age) VALUES (?, ?)",
            (name, age),
        )
        logger.info(f"Inserted user {name} with id {new_id}")
        return int(new_id)  # type: ignore[arg-type]

    def insert_many(self, users: Iterable[UserLike]) -> list[int]:
        """Insert users in order on one prepared statement; stop at the first failure."""
        ids = self._conn.execute_each(
            f"INSERT INTO {self._table} (name, age) VALUES (?, ?)",
            (_as_params(u) for u in users),
        )
        logger.info(f"Inserted {len(ids)} users")
        return [int(i) for i in ids]  # type: ignore[arg-type]

    # -- Read ------------------------------------------------------------------

    def select_by_min_age(self, min_age: int) -> list[User]:
        """Users with ``age >= min_age``, oldest first, ties by ascending id."""
        rows = self._conn.fetchall(
            f"SELECT id, name, age FROM {self._table} WHERE age >= ? ORDER BY age DESC, id ASC",
            (min_age,),
        )
        return [User.from_row(r) for r in rows]

    def get_by_name(self, name: str) -> Optional[User]:
        row = self._conn.fetchone(
            f"SELECT id, name, age FROM {self._table} WHERE name = ?", (name,)
        )
        return User.from_row(row) if row else None

    def list_all(self) -> list[User]:
        rows = self._conn.fetchall(f"SELECT id, name, age FROM {self._table} ORDER BY id")
        return [User.from_row(r) for r in rows]

    def count(self) -> int:
        row = self._conn.fetchone(f"SELECT COUNT(*) AS n FROM {self._table}")
        return int(row["n"]) if row else 0

    # -- Update ----------------------------------------------------------------

    def update_age_by_name(self, name: str, new_age: Optional[int]) -> int:
        """Set ``age`` for ``name``; returns rows affected, 0 when no such user."""
        affected, _ = self._conn.execute(
            f"UPDATE {self._table} SET age = ? WHERE name = ?",
            (new_age, name),
        )
        logger.info(f"Updated age of {name}: {affected} row(s)")
        return affected

    # -- Delete ----------------------------------------------------------------

    def delete_all(self) -> int:
        """Remove every row (demo reset only)."""
        affected, _ = self._conn.execute(f"DELETE FROM {self._table}")
        return affected
