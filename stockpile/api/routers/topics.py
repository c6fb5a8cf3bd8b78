"""Topic / subtopic seeding and resource inspection endpoints.

Routes
------
POST /topics                           Create a topic
POST /topics/{id}/subtopics            Create a subtopic under a topic
GET  /topics/{id}/subtopics            List a topic's subtopics
GET  /subtopics/{id}/resources         Resource records of a subtopic (?status=)
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from stockpile.db.resources import list_resources
from stockpile.db.topics import (
    create_subtopic,
    create_topic,
    get_subtopic,
    get_topic,
    list_subtopics,
)
from stockpile.query import CATEGORIES

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class TopicCreate(BaseModel):
    name: str
    description: Optional[str] = None


class SubtopicCreate(BaseModel):
    name: str
    category: Optional[str] = None
    description: Optional[str] = None


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/topics", status_code=201)
def create_topic_endpoint(body: TopicCreate, request: Request) -> dict[str, Any]:
    with request.app.state.db_lock:
        topic = create_topic(request.app.state.db, body.name, body.description)
    return asdict(topic)


@router.post("/topics/{topic_id}/subtopics", status_code=201)
def create_subtopic_endpoint(
    topic_id: str, body: SubtopicCreate, request: Request
) -> dict[str, Any]:
    """Create a subtopic.  ``category`` should be one of the known hints."""
    conn = request.app.state.db
    if get_topic(conn, topic_id) is None:
        raise HTTPException(status_code=404, detail=f"Topic not found: {topic_id}")
    if body.category and body.category not in CATEGORIES:
        raise HTTPException(
            status_code=422,
            detail=f"Unknown category {body.category!r}. Use one of: {', '.join(CATEGORIES)}",
        )
    with request.app.state.db_lock:
        subtopic = create_subtopic(
            conn, topic_id, body.name, category=body.category, description=body.description
        )
    return asdict(subtopic)


@router.get("/topics/{topic_id}/subtopics")
def list_subtopics_endpoint(topic_id: str, request: Request) -> list[dict[str, Any]]:
    conn = request.app.state.db
    if get_topic(conn, topic_id) is None:
        raise HTTPException(status_code=404, detail=f"Topic not found: {topic_id}")
    return [asdict(s) for s in list_subtopics(conn, topic_id)]


@router.get("/subtopics/{subtopic_id}/resources")
def list_resources_endpoint(
    subtopic_id: str,
    request: Request,
    status: Optional[str] = None,
) -> list[dict[str, Any]]:
    """Return the subtopic's resource records in creation order."""
    conn = request.app.state.db
    if get_subtopic(conn, subtopic_id) is None:
        raise HTTPException(status_code=404, detail=f"Subtopic not found: {subtopic_id}")
    return [asdict(r) for r in list_resources(conn, subtopic_id, status=status)]
