# =============================================================================
# app/routers/projects.py - Project CRUD Endpoints
# =============================================================================
# Handles project creation and the builder steps' updates.
# All endpoints require authentication. Projects are never hard-deleted.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from app.auth import AuthUser, get_current_user
from core.models.project import ProjectCreate, ProjectUpdate
from core.services.project_service import ProjectService

router = APIRouter()


@router.post("", status_code=201)
async def create_project(
    body: ProjectCreate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Create a new project in draft status.

    The project's type fixes which task its deployments run.
    """
    project = ProjectService.create_project(user.id, body)
    return {"success": True, "data": project}


@router.get("")
async def list_projects(
    user: AuthUser = Depends(get_current_user),
):
    """List the caller's projects, most recently updated first."""
    projects = ProjectService.list_projects(user.id)
    return {"success": True, "data": projects, "total": len(projects)}


@router.get("/{project_id}")
async def get_project(
    project_id: Annotated[UUID, Path(description="Project UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """Get one project. 404 if it doesn't exist or isn't the caller's."""
    project = ProjectService.get_project(str(project_id), user_id=user.id)
    return {"success": True, "data": project}


@router.patch("/{project_id}")
async def update_project(
    project_id: Annotated[UUID, Path(description="Project UUID")],
    body: ProjectUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Update name, description or status, and merge config keys.

    Each builder step saves its own keys into config (e.g. the chosen
    model), so config is merged rather than replaced.
    """
    project = ProjectService.update_project(str(project_id), body, user_id=user.id)
    return {"success": True, "data": project}
