"""
Central configuration loader.
Reads from environment variables (via .env); validates what it reads.
NEVER prints secret values.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


_REPO_ROOT = Path(__file__).resolve().parents[1]

SUPPORTED_DRIVERS = ("sqlite", "mysql")
MEMORY = ":memory:"

_IDENTIFIER = re.compile(r"^[A-Za-z0-9_]+$")
_ENDPOINT = re.compile(r"^(?:(?P<scheme>[a-z]+)://)?(?P<host>[^:/]+)(?::(?P<port>\d+))?/?$")


def _get(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    val = os.getenv(key, default)
    if required and not val:
        raise EnvironmentError(f"Missing required environment variable: {key}")
    return val


def is_identifier(name: str) -> bool:
    return bool(_IDENTIFIER.match(name or ""))


def parse_endpoint(endpoint: str, default_port: int = 3306) -> tuple[str, int]:
    """Split ``tcp://host:port`` (or a bare ``host``) into ``(host, port)``."""
    match = _ENDPOINT.match(endpoint.strip())
    if not match:
        raise ValueError(f"Invalid database endpoint: {endpoint!r}")
    scheme = match.group("scheme")
    if scheme not in (None, "tcp"):
        raise ValueError(f"Unsupported endpoint scheme: {scheme!r}")
    port = int(match.group("port")) if match.group("port") else default_port
    return match.group("host"), port


# ---------------------------------------------------------------------------
# Database config
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class DbConfig:
    driver: str = "sqlite"
    host: str = "127.0.0.1"
    port: int = 3306
    user: str = "root"
    password: str = field(default="", repr=False)
    schema: str = "testdb"
    # SQLite only: directory holding one file per schema, None for in-memory.
    data_dir: Optional[Path] = None

    def __post_init__(self) -> None:
        if self.driver not in SUPPORTED_DRIVERS:
            raise ValueError(
                f"Unsupported driver {self.driver!r}; expected one of {', '.join(SUPPORTED_DRIVERS)}"
            )
        if not is_identifier(self.schema):
            raise ValueError(f"Schema name must match [A-Za-z0-9_]+, got {self.schema!r}")

    @property
    def endpoint(self) -> str:
        if self.driver == "sqlite":
            return str(self.data_dir) if self.data_dir else MEMORY
        return f"tcp://{self.host}:{self.port}"


def load_config(env_file: Optional[Path] = None) -> DbConfig:
    """
    Build the one ``DbConfig`` for this process.
    - Loads ``.env`` from the repo root if present (real env vars win)
    - ``DB_PORT`` overrides the port embedded in ``DB_HOST``
    """
    load_dotenv(env_file or _REPO_ROOT / ".env", override=False)

    host, port = parse_endpoint(_get("DB_HOST", default="tcp://127.0.0.1:3306"))  # type: ignore[arg-type]
    port_override = _get("DB_PORT")
    if port_override:
        port = int(port_override)

    raw_dir = _get("DB_DATA_DIR", default=str(get_data_dir()))
    data_dir = None if raw_dir in (None, "", MEMORY) else Path(raw_dir)

    return DbConfig(
        driver=(_get("DB_DRIVER", default="sqlite") or "sqlite").lower(),
        host=host,
        port=port,
        user=_get("DB_USER", default="root"),  # type: ignore[arg-type]
        password=_get("DB_PASSWORD", default=""),  # type: ignore[arg-type]
        schema=_get("DB_SCHEMA", default="testdb"),  # type: ignore[arg-type]
        data_dir=data_dir,
    )


def get_log_level() -> str:
    return (_get("LOG_LEVEL", default="WARNING") or "WARNING").upper()


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------
def get_data_dir() -> Path:
    return _REPO_ROOT / "data"
