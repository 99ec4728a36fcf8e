"""Database layer for passbook application."""

from passbook.database.base import Database
from passbook.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
