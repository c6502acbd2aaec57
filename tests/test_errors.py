"""Unit tests for translating driver exceptions into the error taxonomy."""

from __future__ import annotations

import sqlite3
import unittest

import pymysql

from userdb.errors import (
    ConstraintViolation,
    QueryError,
    SchemaError,
    StoreConnectionError,
    translate,
)


class TestMySQLTranslation(unittest.TestCase):
    def test_check_violation_is_constraint_violation(self):
        exc = pymysql.err.OperationalError(3819, "Check constraint 'chk_users_age' is violated.")
        err = translate(exc)
        self.assertIsInstance(err, ConstraintViolation)
        self.assertEqual(err.code, 3819)
        self.assertEqual(err.sqlstate, "23000")
        self.assertEqual(err.message, "Check constraint 'chk_users_age' is violated.")

    def test_mariadb_check_violation(self):
        exc = pymysql.err.OperationalError(4025, "CONSTRAINT `chk_users_age` failed")
        self.assertIsInstance(translate(exc), ConstraintViolation)

    def test_lost_connection_codes(self):
        for code in (2003, 2006, 2013):
            with self.subTest(code=code):
                err = translate(pymysql.err.OperationalError(code, "Lost connection to MySQL server"))
                self.assertIsInstance(err, StoreConnectionError)
                self.assertEqual(err.code, code)

    def test_duplicate_key(self):
        exc = pymysql.err.IntegrityError(1062, "Duplicate entry 'alice' for key 'uq_users_name'")
        self.assertIsInstance(translate(exc), ConstraintViolation)

    def test_syntax_error_uses_default(self):
        exc = pymysql.err.ProgrammingError(1064, "You have an error in your SQL syntax")
        self.assertIsInstance(translate(exc), QueryError)
        self.assertIsInstance(translate(exc, SchemaError), SchemaError)

    def test_interface_error_is_connection_error(self):
        self.assertIsInstance(translate(pymysql.err.InterfaceError(0, "")), StoreConnectionError)


class TestSqliteTranslation(unittest.TestCase):
    def test_integrity_error(self):
        self.assertIsInstance(translate(sqlite3.IntegrityError("UNIQUE constraint failed")), ConstraintViolation)

    def test_operational_error_uses_default(self):
        self.assertIsInstance(translate(sqlite3.OperationalError("near \"SELEC\": syntax error")), QueryError)


if __name__ == "__main__":
    unittest.main()
