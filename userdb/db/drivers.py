"""Driver adapters — the only code that knows which SQL client library is in use.

Each adapter wraps a DB-API 2.0 module and covers the few places where
the stores differ: opening a session, switching autocommit, creating and
selecting a database, identifier quoting and the table DDL.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any

import pymysql
from pymysql.constants import CLIENT

from userdb.config import MEMORY, DbConfig
from userdb.errors import StoreConnectionError, translate

logger = logging.getLogger(__name__)


class SqliteDriver:
    """
    SQLite store: the "server" is a data directory and every database is a
    file ``<data_dir>/<schema>.db`` attached to the session under its own
    name. Without a data directory, databases are attached in memory.
    """

    name = "sqlite"
    placeholder = "?"
    error = sqlite3.Error

    USERS_DDL = """
CREATE TABLE IF NOT EXISTS {table} (
    id      INTEGER PRIMARY KEY AUTOINCREMENT,
    name    VARCHAR(100) NOT NULL,
    age     INTEGER NULL CHECK (age IS NULL OR age >= 0),
    CONSTRAINT uq_users_name UNIQUE (name)
)
"""

    def __init__(self, config: DbConfig):
        self.config = config

    def connect(self) -> sqlite3.Connection:
        data_dir = self.config.data_dir
        try:
            if data_dir is not None:
                data_dir.mkdir(parents=True, exist_ok=True)
            # isolation_level=None: the session starts in autocommit mode.
            raw = sqlite3.connect(MEMORY, isolation_level=None)
        except OSError as exc:
            raise StoreConnectionError(f"Cannot use data directory {data_dir}: {exc}") from exc
        except sqlite3.Error as exc:
            raise translate(exc, StoreConnectionError) from exc
        raw.execute("PRAGMA foreign_keys = ON")
        return raw

    def set_autocommit(self, raw: sqlite3.Connection, enabled: bool) -> None:
        if enabled:
            # Same as MySQL: turning autocommit back on ends the open transaction.
            if raw.in_transaction:
                raw.commit()
            raw.isolation_level = None
        else:
            raw.isolation_level = "DEFERRED"

    def create_database(self, raw: sqlite3.Connection, schema: str) -> None:
        attached = {row[1] for row in raw.execute("PRAGMA database_list")}
        if schema in attached:
            return
        if self.config.data_dir is None:
            path = MEMORY
        else:
            path = str(self.config.data_dir / f"{schema}.db")
        raw.execute(f"ATTACH DATABASE ? AS {self.quote(schema)}", (path,))
        if path != MEMORY:
            raw.execute(f"PRAGMA {self.quote(schema)}.journal_mode = WAL")
        logger.info(f"Attached database {schema} ({path})")

    def select_database(self, raw: sqlite3.Connection, schema: str) -> None:
        # SQLite cannot switch its main database; tables are qualified instead.
        attached = {row[1] for row in raw.execute("PRAGMA database_list")}
        if schema not in attached:
            raise sqlite3.OperationalError(f"unknown database {schema}")

    def quote(self, identifier: str) -> str:
        return f'"{identifier}"'

    def users_ddl(self, table: str) -> str:
        return self.USERS_DDL.format(table=table)


class MySQLDriver:
    """MySQL / MariaDB over TCP through PyMySQL."""

    name = "mysql"
    placeholder = "%s"
    error = pymysql.err.Error

    USERS_DDL = """
CREATE TABLE IF NOT EXISTS {table} (
    id      INT AUTO_INCREMENT PRIMARY KEY,
    name    VARCHAR(100) NOT NULL,
    age     INT NULL,
    UNIQUE KEY uq_users_name (name),
    CONSTRAINT chk_users_age CHECK (age IS NULL OR age >= 0)
) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4
"""

    def __init__(self, config: DbConfig):
        self.config = config

    def connect(self) -> Any:
        cfg = self.config
        try:
            return pymysql.connect(
                host=cfg.host,
                port=cfg.port,
                user=cfg.user,
                password=cfg.password,
                charset="utf8mb4",
                autocommit=True,
                # rowcount counts matched rows, not only changed ones
                client_flag=CLIENT.FOUND_ROWS,
            )
        except pymysql.err.Error as exc:
            raise translate(exc, StoreConnectionError) from exc

    def set_autocommit(self, raw: Any, enabled: bool) -> None:
        raw.autocommit(enabled)

    def create_database(self, raw: Any, schema: str) -> None:
        with raw.cursor() as cur:
            cur.execute(f"CREATE DATABASE IF NOT EXISTS {self.quote(schema)} DEFAULT CHARACTER SET utf8mb4")

    def select_database(self, raw: Any, schema: str) -> None:
        raw.select_db(schema)

    def quote(self, identifier: str) -> str:
        return f"`{identifier}`"

    def users_ddl(self, table: str) -> str:
        return self.USERS_DDL.format(table=table)


_DRIVERS = {
    SqliteDriver.name: SqliteDriver,
    MySQLDriver.name: MySQLDriver,
}


def get_driver(config: DbConfig):
    try:
        return _DRIVERS[config.driver](config)
    except KeyError:
        raise ValueError(f"Unsupported driver: {config.driver!r}") from None
