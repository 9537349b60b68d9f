"""Owner-scoped record store for pocketledger."""

from pocketledger.database.base import Database
from pocketledger.database.factories import create_sqlite_database
from pocketledger.database.sqlalchemy_db import SQLAlchemyDatabase

__all__ = ["Database", "SQLAlchemyDatabase", "create_sqlite_database"]
