"""Database layer package.

Public re-exports so callers can write::

    from stockpile.db import get_connection, init_db
"""

from stockpile.db.connection import get_connection
from stockpile.db.migrations import init_db

__all__ = ["get_connection", "init_db"]
