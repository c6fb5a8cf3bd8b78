"""FastAPI application factory.

Lifespan
--------
On startup the app opens a single SQLite connection (shared across all
requests via ``request.app.state.db``, writes guarded by
``request.app.state.db_lock``) and initialises the schema.  On
shutdown it closes the connection cleanly.

Routers
-------
    /scraping                      — run the resource pipeline
    /topics, /subtopics/.../resources — seeding and record inspection
"""

from __future__ import annotations

import logging
import threading
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from stockpile import __version__
from stockpile.api.routers import scraping as scraping_router
from stockpile.api.routers import topics as topics_router
from stockpile.config import settings
from stockpile.db import get_connection, init_db


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the DB on startup and close it on shutdown."""
    conn = get_connection()
    init_db(conn)
    app.state.db = conn
    app.state.db_lock = threading.Lock()
    try:
        yield
    finally:
        conn.close()


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(
        title="Stockpile API",
        description=(
            "Discover web resources for research subtopics, extract their "
            "content and inspect per-resource scrape status."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    app.include_router(scraping_router.router, prefix="/scraping", tags=["scraping"])
    app.include_router(topics_router.router, tags=["topics"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn stockpile.api.app:app --reload
app = create_app()
