"""Schema initialisation — database plus the ``users`` table, idempotent."""

from __future__ import annotations

import logging

from userdb.config import is_identifier
from userdb.db.connection import Connection
from userdb.errors import SchemaError, StoreError

logger = logging.getLogger(__name__)

USERS_TABLE = "users"


def ensure_schema(conn: Connection, schema: str) -> None:
    """
    Create database ``schema`` if absent, make it the connection's active
    schema, then create ``users`` if absent. Safe to call repeatedly.

    Raises ``SchemaError`` on any DDL failure; nothing is rolled back.
    """
    if not is_identifier(schema):
        raise SchemaError(f"Invalid schema name: {schema!r}")

    try:
        conn.create_database(schema)
        conn.select_database(schema)
        conn.execute(conn.users_ddl(conn.qualify(USERS_TABLE)))
    except SchemaError:
        raise
    except StoreError as exc:
        raise SchemaError(exc.message, code=exc.code) from exc

    logger.info(f"Schema {schema} ready")
