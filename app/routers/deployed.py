# =============================================================================
# app/routers/deployed.py - Public Deployed Endpoints
# =============================================================================
# The endpoint a deployment's clients call, authenticated only by the
# deployment's API key ('Authorization: Bearer aib_...').
#
#   POST /api/deployed/{id}   run the project's task on the JSON body
#     200 {success, data, usage, timestamp}
#     400 {error, usage}        bad key, inactive deployment, bad input, ...
#     401 {error}               no bearer key
#     500 {error, message}      anything unexpected
#
#   GET /api/deployed/{id}    deployment status and last 7 days of analytics
#     401 on a missing or invalid key
# =============================================================================

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from app.auth import get_api_key
from app.dependencies import DeploymentEngineDep
from app.exceptions import InvalidApiKeyError
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/{deployment_id}")
async def call_deployment(
    deployment_id: str,
    engine: DeploymentEngineDep,
    payload: Annotated[dict[str, Any] | None, Body()] = None,
    api_key: str = Depends(get_api_key),
):
    """
    Run the deployed task.

    The body shape depends on the project's task kind, e.g. {text},
    {text, categories}, {text, maxLength}, {question, context},
    {prompt, style} or {message}.
    """
    result = engine.execute(deployment_id, payload or {}, api_key)
    usage = result.usage.model_dump()

    if not result.success:
        return JSONResponse(
            status_code=400,
            content={"error": result.error, "usage": usage},
        )

    return {
        "success": True,
        "data": result.data.model_dump() if result.data else None,
        "usage": usage,
        "timestamp": utc_now_iso(),
    }


@router.get("/{deployment_id}")
async def deployment_status(
    deployment_id: str,
    engine: DeploymentEngineDep,
    api_key: str = Depends(get_api_key),
):
    """Status of the deployment the key belongs to."""
    if engine.validate_api_key(api_key) != deployment_id:
        raise InvalidApiKeyError()

    status = engine.get_status(deployment_id)
    project = status.get("projects") or {}

    return {
        "success": True,
        "data": {
            "deployment_id": status.get("id"),
            "status": status.get("status"),
            "version": status.get("version"),
            "endpoint_url": status.get("endpoint_url"),
            "project_name": project.get("name"),
            "project_type": project.get("type"),
            "created_at": status.get("created_at"),
            "analytics": status.get("analytics", []),
        },
    }
