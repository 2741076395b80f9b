# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# The provider registry, TaskHandler and DeploymentEngine are built once
# in the app lifespan (app/main.py) and stored on app.state. Tests replace
# them with app.dependency_overrides.
# =============================================================================

from typing import Annotated

from fastapi import Depends, Request

from ai.task_handlers import TaskHandler
from core.services.deployment_service import DeploymentEngine
from lib.supabase_client import SupabaseClient


def get_supabase_client() -> type[SupabaseClient]:
    """
    Get Supabase client wrapper.

    Returns the singleton client wrapper class.
    """
    return SupabaseClient


def get_task_handler(request: Request) -> TaskHandler:
    """TaskHandler built at startup."""
    return request.app.state.task_handler


def get_deployment_engine(request: Request) -> DeploymentEngine:
    """DeploymentEngine built at startup."""
    return request.app.state.deployment_engine


# Type aliases for dependency injection
SupabaseDep = Annotated[type[SupabaseClient], Depends(get_supabase_client)]
TaskHandlerDep = Annotated[TaskHandler, Depends(get_task_handler)]
DeploymentEngineDep = Annotated[DeploymentEngine, Depends(get_deployment_engine)]
