# =============================================================================
# app/routers/deployments.py - Deployment Management Endpoints
# =============================================================================
# Owner-facing management of deployments. All endpoints require the
# session JWT; the public, key-authenticated endpoint lives in deployed.py.
#
# DELETE stops a deployment (status inactive); rows are kept.
# =============================================================================

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query

from app.auth import AuthUser, get_current_user
from app.dependencies import DeploymentEngineDep
from core.models.deployment import DeploymentConfig, DeploymentCreate, DeploymentUpdate
from core.services.project_service import ProjectService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", status_code=201)
async def create_deployment(
    body: DeploymentCreate,
    engine: DeploymentEngineDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Deploy a project as a new version.

    The response carries the deployment's API key. It is not shown again.
    """
    ProjectService.get_project(body.project_id, user_id=user.id)

    config = DeploymentConfig(
        project_id=body.project_id,
        version=engine.next_version(body.project_id),
        model_id=body.model_id,
        model_parameters=body.model_parameters,
        scaling=body.scaling,
        rate_limit=body.rate_limit,
    )
    result = engine.deploy(config)
    return {"success": True, "data": result.model_dump(mode="json")}


@router.get("")
async def list_deployments(
    engine: DeploymentEngineDep,
    project_id: Annotated[UUID | None, Query(description="Only this project's deployments")] = None,
    user: AuthUser = Depends(get_current_user),
):
    """List the caller's deployments, newest first."""
    deployments = engine.list_deployments(user.id, project_id=str(project_id) if project_id else None)
    return {"success": True, "data": deployments}


@router.get("/{deployment_id}")
async def get_deployment(
    deployment_id: Annotated[UUID, Path(description="Deployment UUID")],
    engine: DeploymentEngineDep,
    user: AuthUser = Depends(get_current_user),
):
    """Deployment details with up to 30 days of analytics."""
    deployment = engine.get_owned(str(deployment_id), user.id)
    return {"success": True, "data": deployment}


@router.put("/{deployment_id}")
async def update_deployment(
    deployment_id: Annotated[UUID, Path(description="Deployment UUID")],
    body: DeploymentUpdate,
    engine: DeploymentEngineDep,
    user: AuthUser = Depends(get_current_user),
):
    """Merge new settings into the deployment's config and reactivate it."""
    engine.require_owner(str(deployment_id), user.id)
    engine.update_deployment(str(deployment_id), body.to_partial_config())
    return {"success": True, "message": "Deployment updated successfully"}


@router.delete("/{deployment_id}")
async def stop_deployment(
    deployment_id: Annotated[UUID, Path(description="Deployment UUID")],
    engine: DeploymentEngineDep,
    user: AuthUser = Depends(get_current_user),
):
    """Stop a deployment. Its key stops working immediately."""
    engine.require_owner(str(deployment_id), user.id)
    engine.stop(str(deployment_id))
    return {"success": True, "message": "Deployment stopped successfully"}
