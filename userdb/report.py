"""Plain-text rendering of query results and operation summaries.

Everything here is a pure function of its arguments: no store access,
no printing.
"""

from __future__ import annotations

from typing import Iterable, Optional

from userdb.errors import StoreError
from userdb.models.user import User

ID_WIDTH = 5
NAME_WIDTH = 12
# Rendered in place of a NULL age; never written back to the store.
MISSING_AGE = -1


def display_age(user: User) -> int:
    return user.age if user.age is not None else MISSING_AGE


def format_users_table(users: Iterable[User]) -> str:
    """Fixed-width table with ``ID``, ``Name`` and ``Age`` columns."""
    lines = [f"{'ID':<{ID_WIDTH}}{'Name':<{NAME_WIDTH}}Age"]
    for u in users:
        lines.append(f"{u.id!s:<{ID_WIDTH}}{u.name:<{NAME_WIDTH}}{display_age(u)}")
    return "\n".join(lines)


def format_user_lines(users: Iterable[User]) -> str:
    return "\n".join(
        f"ID={u.id} | name={u.name} | age={display_age(u)}" for u in users
    )


def format_inserted(name: str, new_id: int) -> str:
    return f"Inserted {name} with id = {new_id}"


def format_rows_updated(affected: int, label: Optional[str] = None) -> str:
    if label:
        return f"Updated rows ({label}): {affected}"
    return f"Rows updated: {affected}"


def format_store_error(err: StoreError, where: str) -> str:
    """Operator-facing error line: message, provider code and SQLSTATE."""
    code = err.code if err.code is not None else "n/a"
    text = f"[SQL ERROR @ {where}] {err.message} | error code: {code} | SQLState: {err.sqlstate}"
    if err.rollback_error is not None:
        rb = err.rollback_error
        if isinstance(rb, StoreError):
            text += "\n" + format_store_error(rb, "rollback")
        else:
            text += f"\n[ROLLBACK ERROR] {rb}"
    return text
