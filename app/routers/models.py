# =============================================================================
# app/routers/models.py - Model Catalog Endpoint
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from ai.model_registry import AVAILABLE_MODELS, get_models_by_task, get_recommended_model
from app.auth import AuthUser, get_current_user

router = APIRouter()


@router.get("/models")
async def list_models(
    task: Annotated[str | None, Query(description="Only models supporting this task kind")] = None,
    user: AuthUser = Depends(get_current_user),
):
    """
    List catalog models, optionally filtered by task kind.

    With a task, also returns the recommended model for it (or null when
    nothing supports the task).
    """
    models = get_models_by_task(task) if task else list(AVAILABLE_MODELS)
    recommended = get_recommended_model(task) if task else None

    return {
        "models": [m.model_dump(mode="json") for m in models],
        "recommended": recommended.model_dump(mode="json") if recommended else None,
        "total": len(models),
    }
