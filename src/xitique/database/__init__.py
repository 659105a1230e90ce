"""Database layer for xitique application."""

from xitique.database.base import Database
from xitique.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
