"""Database access for pagekit."""

from .connection import DatabaseManager, db_manager, get_db_pool
from .executor import PostgresExecutor, QueryExecutor

__all__ = [
    "DatabaseManager",
    "db_manager",
    "get_db_pool",
    "PostgresExecutor",
    "QueryExecutor"
]
