"""Error taxonomy for the data-access layer.

Driver exceptions (``sqlite3`` or PyMySQL, both DB-API 2.0) are translated
into these types at the connection boundary so callers never depend on a
particular driver.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, Optional, Type


class StoreError(Exception):
    """Base class for store-originated failures."""

    default_sqlstate = "HY000"

    def __init__(self, message: str, code: Optional[int] = None, sqlstate: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.sqlstate = sqlstate or self.default_sqlstate
        self.rollback_error: Optional[BaseException] = None


class StoreConnectionError(StoreError):
    """Network or authentication failure while opening a session."""

    default_sqlstate = "08001"


class SchemaError(StoreError):
    """DDL failure while creating or selecting the schema."""

    default_sqlstate = "42000"


class ConstraintViolation(StoreError):
    """Uniqueness, NOT NULL or CHECK violation."""

    default_sqlstate = "23000"


class QueryError(StoreError):
    """Malformed statement, type mismatch or any other statement failure."""

    default_sqlstate = "42000"


class TransactionError(StoreError):
    """Transaction coordinator used out of order (e.g. nested begin)."""

    default_sqlstate = "25000"


# MySQL / MariaDB server and client error numbers whose DB-API class
# (usually OperationalError) does not say what went wrong.
_MYSQL_CODES: dict[int, Type[StoreError]] = {
    1045: StoreConnectionError,  # access denied
    2003: StoreConnectionError,  # can't connect to server
    2006: StoreConnectionError,  # server has gone away
    2013: StoreConnectionError,  # lost connection during query
    2055: StoreConnectionError,  # lost connection, system error
    3819: ConstraintViolation,  # CHECK constraint violated (MySQL)
    4025: ConstraintViolation,  # CHECK constraint failed (MariaDB)
}


def classify(exc: BaseException, default: Type[StoreError] = QueryError) -> Type[StoreError]:
    """Map a DB-API exception to a taxonomy class.

    MySQL error numbers are checked first; otherwise the DB-API category
    decides. Both drivers expose the standard exception hierarchy, so the
    class names are enough; no driver module is imported here.
    """
    if getattr(exc, "sqlite_errorcode", None) is None:
        args = getattr(exc, "args", ())
        if args and isinstance(args[0], int) and args[0] in _MYSQL_CODES:
            return _MYSQL_CODES[args[0]]
    names = {cls.__name__ for cls in type(exc).__mro__}
    if "IntegrityError" in names:
        return ConstraintViolation
    if "InterfaceError" in names:
        return StoreConnectionError
    return default


def error_code(exc: BaseException) -> Optional[int]:
    """Provider-specific numeric code, when the driver exposes one."""
    code = getattr(exc, "sqlite_errorcode", None)
    if code is not None:
        return code
    args = getattr(exc, "args", ())
    if args and isinstance(args[0], int):
        return args[0]
    return None


def error_message(exc: BaseException) -> str:
    args = getattr(exc, "args", ())
    # PyMySQL: (code, message)
    if len(args) >= 2 and isinstance(args[0], int):
        return str(args[1])
    return str(exc)


def translate(exc: BaseException, default: Type[StoreError] = QueryError) -> StoreError:
    cls = classify(exc, default)
    return cls(error_message(exc), code=error_code(exc))


@contextmanager
def translate_errors(
    driver_error: Type[BaseException],
    default: Type[StoreError] = QueryError,
) -> Generator[None, None, None]:
    """Re-raise ``driver_error`` instances as ``StoreError`` subclasses."""
    try:
        yield
    except StoreError:
        raise
    except driver_error as exc:
        raise translate(exc, default) from exc
