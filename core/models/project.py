# =============================================================================
# core/models/project.py - Project Schemas
# =============================================================================
# A project is one owner-defined AI application (sentiment analysis,
# summarization, ...). Data sources and deployments hang off a project.
#
# Projects are created by their owner, mutated through the builder steps
# and never hard-deleted.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from .task import TaskKind


class ProjectStatus(str, Enum):
    """
    Lifecycle of a project.

    Flow: draft -> building -> deployed
                          \\-> error
    """
    DRAFT = "draft"
    BUILDING = "building"
    DEPLOYED = "deployed"
    ERROR = "error"


class ProjectCreate(BaseModel):
    """Input for creating a project."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Human-readable project name"
    )

    description: str | None = Field(
        default=None,
        max_length=2000,
    )

    type: TaskKind = Field(
        ...,
        description="Task kind this project performs"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Review Sentiment",
                "description": "Classify product reviews",
                "type": "sentiment_analysis",
            }
        }
    }


class ProjectUpdate(BaseModel):
    """Partial update; config is merged into the stored blob."""
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    status: ProjectStatus | None = None
    config: dict[str, Any] | None = None


class ProjectResponse(BaseModel):
    """Project as returned to clients."""
    id: UUID
    user_id: UUID
    name: str
    description: str | None = None
    type: TaskKind
    status: ProjectStatus = ProjectStatus.DRAFT
    config: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None
