# =============================================================================
# app/routers/inference.py - Builder Test Inference
# =============================================================================
# Lets a project owner try a task against a model before deploying.
# Runs through the same TaskHandler.dispatch() as the deployed endpoint,
# but is authenticated with the session JWT and records no analytics.
# =============================================================================

import logging
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from ai.model_registry import get_recommended_model
from ai.task_handlers import UnsupportedTaskError
from app.auth import AuthUser, get_current_user
from app.dependencies import TaskHandlerDep
from core.models.task import TaskConfig
from core.services.project_service import ProjectService
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter()


class InferenceConfig(BaseModel):
    """Optional model choice and generation overrides."""

    model_config = ConfigDict(protected_namespaces=())

    model_id: str | None = None
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, ge=1)


class InferenceRequest(BaseModel):
    """Body of POST /ai/inference."""
    project_id: str
    task_type: str
    input: dict[str, Any] = Field(default_factory=dict)
    config: InferenceConfig = Field(default_factory=InferenceConfig)

    model_config = {
        "json_schema_extra": {
            "example": {
                "project_id": "550e8400-e29b-41d4-a716-446655440000",
                "task_type": "sentiment_analysis",
                "input": {"text": "The checkout flow is so much faster now"},
                "config": {"temperature": 0.2},
            }
        }
    }


@router.post("/inference")
async def run_inference(
    body: InferenceRequest,
    task_handler: TaskHandlerDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Run one task on one of the caller's projects.

    The model defaults to the recommended one for the task kind.

    Raises:
        404: Project not found
        400: Unsupported task, unknown model or missing input field
        500: Provider failure
    """
    ProjectService.get_project(body.project_id, user_id=user.id)

    model_id = body.config.model_id
    if not model_id:
        recommended = get_recommended_model(body.task_type)
        if recommended is None:
            raise UnsupportedTaskError(body.task_type)
        model_id = recommended.id

    task_config = TaskConfig(
        model_id=model_id,
        temperature=body.config.temperature,
        max_tokens=body.config.max_tokens,
    )

    result = task_handler.dispatch(body.task_type, body.input, task_config)
    logger.info(f"Inference {body.task_type} on project {body.project_id} via {model_id}: {result.processing_time}ms")

    return {
        "success": True,
        "data": result.model_dump(),
        "timestamp": utc_now_iso(),
    }
