"""Shared test helpers: throwaway SQLite stores."""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import Optional

from userdb.config import DbConfig
from userdb.db.connection import Connection, ConnectionProvider
from userdb.db.schema import ensure_schema


class TempStore:
    """A SQLite store rooted in a fresh temporary directory."""

    def __init__(self, schema: str = "testdb", password: str = ""):
        self.dir = Path(tempfile.mkdtemp(prefix="userdb-"))
        self.config = DbConfig(driver="sqlite", data_dir=self.dir, schema=schema, password=password)
        self.provider = ConnectionProvider(self.config)
        self._open: list[Connection] = []

    def connect(self, init: bool = True) -> Connection:
        conn = self.provider.connect()
        self._open.append(conn)
        if init:
            ensure_schema(conn, self.config.schema)
        return conn

    def cleanup(self) -> None:
        for conn in self._open:
            conn.close()
        shutil.rmtree(self.dir, ignore_errors=True)


def users_table_sql(conn: Connection, schema: str = "testdb") -> Optional[str]:
    row = conn.fetchone(
        f'SELECT sql FROM "{schema}".sqlite_master WHERE type = ? AND name = ?',
        ("table", "users"),
    )
    return row["sql"] if row else None
