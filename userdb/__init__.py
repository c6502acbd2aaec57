"""userdb — a thin transactional data-access layer over SQLite or MySQL."""

__version__ = "0.1.0"
