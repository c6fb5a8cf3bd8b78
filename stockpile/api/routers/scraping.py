"""Scraping endpoint — the HTTP face of :func:`start_scraping`.

Routes
------
POST /scraping     Body: {"subtopic_ids": [...], "backend": "direct"}  → summary
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from stockpile.errors import InitError
from stockpile.pipeline import start_scraping

logger = logging.getLogger(__name__)

router = APIRouter()


class ScrapeRequest(BaseModel):
    subtopic_ids: list[str] = Field(..., min_length=1)
    backend: Optional[str] = None


class ScrapeResponse(BaseModel):
    message: str


@router.post("", response_model=ScrapeResponse)
def scrape_endpoint(body: ScrapeRequest, request: Request) -> dict[str, str]:
    """Discover and extract resources for every subtopic in the request.

    Per-resource failures are reported through record status, not here; the
    request itself fails only when the backend cannot be initialised.
    """
    conn = request.app.state.db
    try:
        message = start_scraping(
            body.subtopic_ids,
            conn=conn,
            backend=body.backend,
            lock=request.app.state.db_lock,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except InitError as exc:
        logger.error("Scrape backend unavailable: %s", exc)
        raise HTTPException(
            status_code=502, detail=f"Scrape backend unavailable: {exc}"
        ) from exc
    return {"message": message}
