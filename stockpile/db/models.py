"""Dataclass models representing DB rows.

These are plain Python objects – not ORM models.  The DB layer serialises /
deserialises to and from these types.
"""

from __future__ import annotations

from dataclasses import dataclass

RESOURCE_STATUSES = ("pending", "completed", "failed")


@dataclass
class Topic:
    id: str
    name: str
    description: str | None
    created_at: int
    updated_at: int


@dataclass
class Subtopic:
    id: str
    topic_id: str
    name: str
    description: str | None
    category: str | None
    created_at: int
    updated_at: int


@dataclass(frozen=True)
class SubtopicWithTopic:
    """What the pipeline needs to know about a subtopic to build its query."""

    id: str
    name: str
    topic_name: str
    category: str | None = None


@dataclass
class ResourceRecord:
    id: str
    subtopic_id: str
    url: str
    title: str | None
    summary: str | None
    full_content: str | None
    status: str
    created_at: int
    updated_at: int
