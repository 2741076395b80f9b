# =============================================================================
# core/services/project_service.py - Project Business Logic
# =============================================================================
# Handles project CRUD operations and ownership checks.
# Projects are never hard-deleted.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now_iso
from core.models.project import ProjectCreate, ProjectStatus, ProjectUpdate
from app.exceptions import ProjectNotFoundError

logger = logging.getLogger(__name__)


class ProjectService:
    """
    Service for project management operations.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def create_project(
        user_id: UUID | str,
        data: ProjectCreate,
    ) -> dict[str, Any]:
        """
        Create a new project in draft status.

        Args:
            user_id: The user ID who owns this project
            data: Name, description and task kind

        Returns:
            Created project dict

        Raises:
            Exception: If creation fails
        """
        client = SupabaseClient.get_client()

        row = {
            "user_id": normalize_uuid(user_id),
            "name": data.name,
            "description": data.description,
            "type": data.type.value,
            "status": ProjectStatus.DRAFT.value,
            "config": {},
        }

        try:
            response = client.table("projects").insert(row).execute()

            if response.data:
                project = response.data[0]
                logger.info(f"Created project: {project['id']} ({data.type.value}) for user: {user_id}")
                return project

            raise Exception("Insert returned no data")

        except Exception as e:
            logger.error(f"Failed to create project: {e}")
            raise

    @staticmethod
    def get_project(
        project_id: str | UUID,
        user_id: UUID | str | None = None,
    ) -> dict[str, Any]:
        """
        Get a project by ID.

        Args:
            project_id: The project UUID
            user_id: If provided, verify the project belongs to this user

        Raises:
            ProjectNotFoundError: If project doesn't exist or user doesn't own it
        """
        project = SupabaseClient.fetch_project(project_id)

        if not project:
            raise ProjectNotFoundError(str(project_id))

        # Don't reveal that someone else's project exists
        if user_id and str(project.get("user_id")) != str(user_id):
            raise ProjectNotFoundError(str(project_id))

        return project

    @staticmethod
    def list_projects(user_id: UUID | str) -> list[dict[str, Any]]:
        """List a user's projects, most recently updated first."""
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("projects")
                .select("*")
                .eq("user_id", normalize_uuid(user_id))
                .order("updated_at", desc=True)
                .execute()
            )
            return response.data or []

        except Exception as e:
            logger.error(f"Failed to list projects: {e}")
            raise

    @staticmethod
    def update_project(
        project_id: str | UUID,
        data: ProjectUpdate,
        user_id: UUID | str | None = None,
    ) -> dict[str, Any]:
        """
        Update a project.

        The config dict is merged into the stored one, so the builder
        steps can each save their own keys.

        Raises:
            ProjectNotFoundError: If project doesn't exist or user doesn't own it
        """
        project = ProjectService.get_project(project_id, user_id=user_id)

        update_data: dict[str, Any] = {}
        if data.name is not None:
            update_data["name"] = data.name
        if data.description is not None:
            update_data["description"] = data.description
        if data.status is not None:
            update_data["status"] = data.status.value
        if data.config is not None:
            update_data["config"] = {**(project.get("config") or {}), **data.config}

        if not update_data:
            return project  # Nothing to update

        update_data["updated_at"] = utc_now_iso()
        return ProjectService._write(project_id, update_data, project)

    @staticmethod
    def set_status(project_id: str | UUID, status: ProjectStatus) -> None:
        """Move a project to `status` (used when a deployment goes live)."""
        client = SupabaseClient.get_client()
        client.table("projects").update({
            "status": status.value,
            "updated_at": utc_now_iso(),
        }).eq("id", normalize_uuid(project_id)).execute()
        logger.info(f"Project {project_id} -> {status.value}")

    @staticmethod
    def _write(
        project_id: str | UUID,
        update_data: dict[str, Any],
        fallback: dict[str, Any],
    ) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        project_id_str = normalize_uuid(project_id)

        try:
            response = (
                client.table("projects")
                .update(update_data)
                .eq("id", project_id_str)
                .execute()
            )

            if response.data:
                logger.info(f"Updated project: {project_id_str}")
                return response.data[0]

            return {**fallback, **update_data}

        except Exception as e:
            logger.error(f"Failed to update project: {e}")
            raise
