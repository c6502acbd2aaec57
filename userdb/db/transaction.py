"""Transaction coordinator — explicit commit/rollback around repository calls."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Callable, Generator, TypeVar

from userdb.db.connection import Connection
from userdb.errors import StoreError, TransactionError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TxState(str, Enum):
    AUTOCOMMIT = "autocommit"
    IN_TRANSACTION = "in_transaction"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class TransactionCoordinator:
    """
    Groups repository operations into one atomic unit on one connection.

    ``AUTOCOMMIT -> IN_TRANSACTION -> (COMMITTED | ROLLED_BACK) -> AUTOCOMMIT``

    The connection always leaves ``transaction()`` with autocommit enabled,
    whether the body succeeded or not. This is the only component that
    rolls back, and it always re-raises the original failure afterwards.
    """

    def __init__(self, conn: Connection):
        self._conn = conn
        self.state = TxState.AUTOCOMMIT
        # outcome of the last finished transaction
        self.last_outcome: TxState | None = None

    @property
    def active(self) -> bool:
        return self.state is TxState.IN_TRANSACTION

    @contextmanager
    def transaction(self) -> Generator[Connection, None, None]:
        """Commit on success; roll back and re-raise on any exception, including
        ``KeyboardInterrupt`` and ``SystemExit``."""
        if self.active or not self._conn.autocommit:
            raise TransactionError("A transaction is already active on this connection")

        self._conn.autocommit = False
        self.state = TxState.IN_TRANSACTION
        logger.info("Transaction started")
        try:
            yield self._conn
            self._conn.commit()
        except BaseException as exc:
            self._rollback(exc)
            self._finish(TxState.ROLLED_BACK, original=exc)
            raise
        self._finish(TxState.COMMITTED)
        logger.info("Transaction committed")

    def run(self, work: Callable[[Connection], T]) -> T:
        """Run ``work(connection)`` inside ``transaction()`` and return its result."""
        with self.transaction() as conn:
            return work(conn)

    # -- internals -------------------------------------------------------------

    def _rollback(self, original: BaseException) -> None:
        try:
            self._conn.rollback()
        except StoreError as rb_exc:
            logger.error(f"Rollback failed after {type(original).__name__}: {original}; rollback error: {rb_exc}")
            if isinstance(original, StoreError):
                original.rollback_error = rb_exc
            original.add_note(f"rollback failed: {type(rb_exc).__name__}: {rb_exc}")
        else:
            logger.warning(f"Transaction rolled back after {type(original).__name__}: {original}")

    def _finish(self, outcome: TxState, original: BaseException | None = None) -> None:
        """
        Record ``outcome`` and switch autocommit back on.

        Turning autocommit on ends any transaction still open, on SQLite and
        MySQL alike: if the rollback before this failed, whatever the body
        wrote so far is committed here.
        """
        self.last_outcome = outcome
        self.state = outcome
        try:
            self._conn.autocommit = True
        except StoreError as exc:
            if original is None:
                raise
            logger.error(f"Could not restore autocommit: {exc}")
            original.add_note(f"restoring autocommit failed: {exc}")
        finally:
            self.state = TxState.AUTOCOMMIT
