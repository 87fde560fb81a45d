"""Shared Pydantic base model for tracked entities."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TrackedEntity(BaseModel):
    """One record owned by a PersistedCollection.

    Subclasses add kind-specific attributes and a lifecycle status.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str
    added_at: datetime = Field(default_factory=utcnow)
