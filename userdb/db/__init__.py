"""Database layer — driver adapters, schema, repository and transactions."""

from userdb.db.connection import Connection, ConnectionProvider
from userdb.db.schema import USERS_TABLE, ensure_schema
from userdb.db.transaction import TransactionCoordinator, TxState
from userdb.db.user_repo import UserRepository

__all__ = [
    "Connection",
    "ConnectionProvider",
    "USERS_TABLE",
    "ensure_schema",
    "TransactionCoordinator",
    "TxState",
    "UserRepository",
]
