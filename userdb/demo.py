"""
End-to-end walk through the data-access layer.

1. Connect and ensure the schema
2. Reset the ``users`` table
3. Insert one user and print its generated id
4. Insert/update/commit inside a transaction
5. Query users by minimum age and print a table
6. Update outside a transaction
7. Print the final table state
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

from userdb.config import get_log_level, load_config
from userdb.db.connection import Connection, ConnectionProvider
from userdb.db.schema import ensure_schema
from userdb.db.transaction import TransactionCoordinator
from userdb.db.user_repo import UserRepository
from userdb.errors import StoreError
from userdb.redact import install_log_redaction, redact_text
from userdb.report import (
    format_inserted,
    format_rows_updated,
    format_store_error,
    format_user_lines,
    format_users_table,
)

logger = logging.getLogger(__name__)


def demo_transaction(conn: Connection, out: TextIO, err: TextIO, violate: bool = False) -> None:
    """
    Bulk insert alice and bob, bump alice's age and commit.

    With ``violate=True`` a duplicate ``alice`` is inserted before the
    commit, so the whole unit is rolled back and the error re-raised.
    """
    repo = UserRepository(conn)
    try:
        with TransactionCoordinator(conn).transaction():
            repo.insert_many([("alice", 24), ("bob", 29)])
            changed = repo.update_age_by_name("alice", 25)
            print(format_rows_updated(changed), file=out)
            if violate:
                repo.insert_one("alice", 40)
    except StoreError as exc:
        print(format_store_error(exc, "demo_transaction"), file=err)
        print("Transaction rolled back.", file=err)
        raise
    print("Transaction committed.", file=out)


def run_demo(
    provider: ConnectionProvider,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
    violate: bool = False,
) -> int:
    """Run the whole walk-through; return the process exit code."""
    out = out or sys.stdout
    err = err or sys.stderr
    secrets = [provider.config.password]
    try:
        with provider.connect() as conn:
            ensure_schema(conn, provider.config.schema)
            repo = UserRepository(conn)

            # Demo reset only.
            repo.delete_all()

            new_id = repo.insert_one("carol", 32)
            print(format_inserted("carol", new_id), file=out)

            try:
                demo_transaction(conn, out, err, violate=violate)
            except StoreError:
                print("Transaction demo failed (rolled back).", file=err)

            print("\nUsers with age >= 25:", file=out)
            print(format_users_table(repo.select_by_min_age(25)), file=out)

            affected = repo.update_age_by_name("bob", 31)
            print("\n" + format_rows_updated(affected, "bob -> 31"), file=out)

            print("\nFinal users:", file=out)
            print(format_user_lines(repo.list_all()), file=out)
    except StoreError as exc:
        print(redact_text(format_store_error(exc, "main"), secrets), file=err)
        return 1
    except Exception as exc:
        logger.exception("Unexpected error")
        print(redact_text(f"[ERROR] {type(exc).__name__}: {exc}", secrets), file=err)
        return 1
    return 0


def main() -> None:
    logging.basicConfig(
        level=get_log_level(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    try:
        config = load_config()
        provider = ConnectionProvider(config)
    except (ValueError, OSError) as exc:
        print(f"[CONFIG ERROR] {exc}", file=sys.stderr)
        sys.exit(1)
    install_log_redaction([config.password])
    sys.exit(run_demo(provider))


if __name__ == "__main__":
    main()
