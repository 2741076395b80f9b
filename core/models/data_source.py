# =============================================================================
# core/models/data_source.py - Data Source Schemas
# =============================================================================
# A data source is one input attached to a project (an uploaded file or a
# remote API). Its status walks pending -> processing -> ready | error as
# the ingestion pipeline runs.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class DataSourceType(str, Enum):
    """Kinds of data source a project can attach."""
    CSV = "csv"
    JSON = "json"
    TEXT = "text"
    API = "api"
    DATABASE = "database"


class DataSourceStatus(str, Enum):
    """
    Processing state of a data source.

    Terminal at ready or error. Builder steps only use ready sources.
    """
    PENDING = "pending"
    PROCESSING = "processing"
    READY = "ready"
    ERROR = "error"


class DataSourceCreate(BaseModel):
    """Input for registering a data source on a project."""

    name: str = Field(..., min_length=1, max_length=255)

    type: DataSourceType = Field(..., description="Source kind")

    source_config: dict[str, Any] = Field(
        default_factory=dict,
        description="Processor configuration (text column, split mode, API url, ...)"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Support tickets",
                "type": "csv",
                "source_config": {"text_column": "message"},
            }
        }
    }


class DataSourceResponse(BaseModel):
    """Data source as returned to clients."""
    id: UUID
    project_id: UUID
    name: str
    type: DataSourceType
    status: DataSourceStatus = DataSourceStatus.PENDING
    row_count: int = 0
    source_config: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None
