"""Unit tests for configuration loading."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from userdb.config import DbConfig, load_config, parse_endpoint

_NO_ENV_FILE = Path(tempfile.gettempdir()) / "userdb-missing.env"


def _clean_env(**values: str) -> dict[str, str]:
    env = {k: v for k, v in os.environ.items() if not k.startswith("DB_")}
    env.update(values)
    return env


class TestParseEndpoint(unittest.TestCase):
    def test_tcp_endpoint(self):
        self.assertEqual(parse_endpoint("tcp://127.0.0.1:3306"), ("127.0.0.1", 3306))

    def test_bare_host_uses_default_port(self):
        self.assertEqual(parse_endpoint("db.internal"), ("db.internal", 3306))
        self.assertEqual(parse_endpoint("db.internal", default_port=3307), ("db.internal", 3307))

    def test_rejects_other_schemes(self):
        with self.assertRaises(ValueError):
            parse_endpoint("http://db:3306")

    def test_rejects_garbage(self):
        with self.assertRaises(ValueError):
            parse_endpoint("tcp://:abc")


class TestDbConfig(unittest.TestCase):
    def test_defaults(self):
        cfg = DbConfig()
        self.assertEqual(cfg.driver, "sqlite")
        self.assertEqual(cfg.schema, "testdb")
        self.assertEqual(cfg.endpoint, ":memory:")

    def test_frozen(self):
        cfg = DbConfig()
        with self.assertRaises(Exception):
            cfg.schema = "other"  # type: ignore[misc]

    def test_repr_hides_password(self):
        self.assertNotIn("hunter2", repr(DbConfig(password="hunter2")))

    def test_invalid_schema(self):
        with self.assertRaises(ValueError):
            DbConfig(schema="test`db")

    def test_unknown_driver(self):
        with self.assertRaises(ValueError):
            DbConfig(driver="oracle")

    def test_mysql_endpoint(self):
        cfg = DbConfig(driver="mysql", host="db", port=3307)
        self.assertEqual(cfg.endpoint, "tcp://db:3307")


class TestLoadConfig(unittest.TestCase):
    def test_from_environment(self):
        env = _clean_env(
            DB_DRIVER="MySQL",
            DB_HOST="tcp://db.example:3310",
            DB_USER="app",
            DB_PASSWORD="pw",
            DB_SCHEMA="shop",
        )
        with patch.dict(os.environ, env, clear=True):
            cfg = load_config(env_file=_NO_ENV_FILE)
        self.assertEqual(cfg.driver, "mysql")
        self.assertEqual((cfg.host, cfg.port), ("db.example", 3310))
        self.assertEqual(cfg.user, "app")
        self.assertEqual(cfg.password, "pw")
        self.assertEqual(cfg.schema, "shop")

    def test_port_override(self):
        env = _clean_env(DB_HOST="tcp://db:3306", DB_PORT="4000")
        with patch.dict(os.environ, env, clear=True):
            cfg = load_config(env_file=_NO_ENV_FILE)
        self.assertEqual(cfg.port, 4000)

    def test_memory_data_dir(self):
        with patch.dict(os.environ, _clean_env(DB_DATA_DIR=":memory:"), clear=True):
            cfg = load_config(env_file=_NO_ENV_FILE)
        self.assertIsNone(cfg.data_dir)

    def test_defaults(self):
        with patch.dict(os.environ, _clean_env(), clear=True):
            cfg = load_config(env_file=_NO_ENV_FILE)
        self.assertEqual(cfg.driver, "sqlite")
        self.assertEqual(cfg.user, "root")
        self.assertEqual(cfg.data_dir.name, "data")

    def test_env_file_does_not_override_environment(self):
        with tempfile.TemporaryDirectory() as tmp:
            env_file = Path(tmp) / ".env"
            env_file.write_text("DB_SCHEMA=from_file\nDB_USER=file_user\n", encoding="utf-8")
            with patch.dict(os.environ, _clean_env(DB_SCHEMA="from_env"), clear=True):
                cfg = load_config(env_file=env_file)
        self.assertEqual(cfg.schema, "from_env")
        self.assertEqual(cfg.user, "file_user")


if __name__ == "__main__":
    unittest.main()
