"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from stockpile.api import app

    uvicorn stockpile.api:app --reload
"""

from stockpile.api.app import app

__all__ = ["app"]
