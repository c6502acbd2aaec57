"""Connection provider and the session wrapper handed to every component."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Generator, Iterable, Optional, Sequence

from userdb.config import DbConfig
from userdb.db.drivers import get_driver
from userdb.errors import QueryError, translate_errors

logger = logging.getLogger(__name__)


class Connection:
    """
    One stateful session against the store.

    Owned exclusively by whoever opened it; closes on ``__exit__`` so the
    session is released on every exit path. All statements use ``?``
    placeholders and bound parameters; the driver's own paramstyle is
    substituted here.
    """

    def __init__(self, raw: Any, driver: Any):
        self._raw = raw
        self._driver = driver
        self._autocommit = True
        self.schema: Optional[str] = None

    # -- lifecycle -------------------------------------------------------------

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._raw is None

    def close(self) -> None:
        if self._raw is not None:
            raw, self._raw = self._raw, None
            with translate_errors(self._driver.error):
                raw.close()
            logger.info("Connection closed")

    @property
    def raw(self) -> Any:
        if self._raw is None:
            raise QueryError("Connection is closed")
        return self._raw

    @property
    def driver_name(self) -> str:
        return self._driver.name

    # -- transaction control ---------------------------------------------------

    @property
    def autocommit(self) -> bool:
        return self._autocommit

    @autocommit.setter
    def autocommit(self, enabled: bool) -> None:
        with translate_errors(self._driver.error):
            self._driver.set_autocommit(self.raw, enabled)
        self._autocommit = enabled

    def commit(self) -> None:
        with translate_errors(self._driver.error):
            self.raw.commit()

    def rollback(self) -> None:
        with translate_errors(self._driver.error):
            self.raw.rollback()

    # -- schema helpers ----------------------------------------------------------

    def create_database(self, name: str) -> None:
        with translate_errors(self._driver.error):
            self._driver.create_database(self.raw, name)

    def select_database(self, name: str) -> None:
        with translate_errors(self._driver.error):
            self._driver.select_database(self.raw, name)
        self.schema = name

    def qualify(self, table: str) -> str:
        """``table`` qualified with the active schema, quoted for the driver."""
        if self.schema is None:
            return table
        return f"{self._driver.quote(self.schema)}.{table}"

    def users_ddl(self, table: str) -> str:
        return self._driver.users_ddl(table)

    # -- statements --------------------------------------------------------------

    def _render(self, sql: str) -> str:
        if self._driver.placeholder == "?":
            return sql
        return sql.replace("?", self._driver.placeholder)

    @contextmanager
    def cursor(self) -> Generator[Any, None, None]:
        """Scoped cursor: always closed, driver errors translated."""
        with translate_errors(self._driver.error):
            cur = self.raw.cursor()
            try:
                yield cur
            finally:
                cur.close()

    def execute(self, sql: str, params: Sequence[Any] = ()) -> tuple[int, Optional[int]]:
        """Run one statement; return ``(rowcount, lastrowid)``."""
        logger.debug(f"execute: {sql.strip()}")
        with self.cursor() as cur:
            cur.execute(self._render(sql), tuple(params))
            return cur.rowcount, cur.lastrowid

    def execute_each(self, sql: str, param_sets: Iterable[Sequence[Any]]) -> list[Optional[int]]:
        """
        Re-execute one statement for each parameter set on a single cursor.
        Stops at the first failure; earlier executions are not undone here.
        Returns the ``lastrowid`` of each execution.
        """
        rendered = self._render(sql)
        logger.debug(f"execute_each: {sql.strip()}")
        ids: list[Optional[int]] = []
        with self.cursor() as cur:
            for params in param_sets:
                cur.execute(rendered, tuple(params))
                ids.append(cur.lastrowid)
        return ids

    def fetchall(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        logger.debug(f"fetchall: {sql.strip()}")
        with self.cursor() as cur:
            cur.execute(self._render(sql), tuple(params))
            columns = [d[0] for d in (cur.description or [])]
            return [dict(zip(columns, row)) for row in cur.fetchall()]

    def fetchone(self, sql: str, params: Sequence[Any] = ()) -> Optional[dict[str, Any]]:
        rows = self.fetchall(sql, params)
        return rows[0] if rows else None


class ConnectionProvider:
    """
    Opens sessions for one ``DbConfig``.

    Built once by the entry point and passed to whatever needs a
    connection; there is no process-wide driver handle.
    """

    def __init__(self, config: DbConfig):
        self.config = config
        self._driver = get_driver(config)

    def connect(self) -> Connection:
        logger.info(f"Connecting to {self.config.driver} store at {self.config.endpoint} as {self.config.user}")
        raw = self._driver.connect()
        return Connection(raw, self._driver)
