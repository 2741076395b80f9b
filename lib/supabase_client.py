# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides specialized read methods for:
# - Projects (the owner-defined AI applications)
# - Data sources attached to a project
# - Deployments, including the API-key lookup used by the gateway
# - Daily analytics rows
#
# Writes live in core/services, which call get_client() directly.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   project = SupabaseClient.fetch_project(project_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings
from lib.utils import ApplicationError

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST code returned by .single() when no row matches
NO_ROWS_CODE = "PGRST116"


class SupabaseClientError(ApplicationError):
    """Error during Supabase operations."""

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, suggestion=suggestion, details=details)


def is_no_rows_error(error: Exception) -> bool:
    """True when a .single() query failed only because nothing matched."""
    return NO_ROWS_CODE in str(error)


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        deployment = SupabaseClient.fetch_deployment(deployment_id)
        project_type = deployment["projects"]["type"] if deployment else None
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        Ownership checks are done explicitly in the service layer.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return str(uuid_value) if isinstance(uuid_value, UUID) else uuid_value

    @classmethod
    def _fetch_single(
        cls,
        table: str,
        columns: str,
        filters: dict[str, Any],
        error_code: str,
    ) -> dict[str, Any] | None:
        """Run a .single() select, mapping "no rows" to None."""
        client = cls.get_client()

        try:
            query = client.table(table).select(columns)
            for column, value in filters.items():
                query = query.eq(column, value)
            response = query.single().execute()
            return response.data

        except Exception as e:
            if is_no_rows_error(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch from {table}: {e}",
                code=error_code,
                details={"table": table, **{k: str(v) for k, v in filters.items()}}
            )

    # -------------------------------------------------------------------------
    # Projects
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_project(cls, project_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a project by ID.

        Returns:
            Project dict with all fields, or None if not found
        """
        return cls._fetch_single(
            "projects",
            "*",
            {"id": cls._normalize_uuid(project_id)},
            "FETCH_PROJECT_FAILED",
        )

    # -------------------------------------------------------------------------
    # Data Sources
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_data_source(cls, data_source_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a data source with its owning project's user_id.

        The nested `projects` key is used for ownership checks.
        """
        return cls._fetch_single(
            "data_sources",
            "*, projects!inner(user_id)",
            {"id": cls._normalize_uuid(data_source_id)},
            "FETCH_DATA_SOURCE_FAILED",
        )

    # -------------------------------------------------------------------------
    # Deployments
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_deployment(
        cls,
        deployment_id: str | UUID,
        active_only: bool = False,
    ) -> dict[str, Any] | None:
        """
        Fetch a deployment joined with its project's owner, name and type.

        Args:
            deployment_id: The deployment UUID
            active_only: Only match a deployment whose status is "active"

        Returns:
            Deployment dict with a nested `projects` dict, or None
        """
        filters: dict[str, Any] = {"id": cls._normalize_uuid(deployment_id)}
        if active_only:
            filters["status"] = "active"

        return cls._fetch_single(
            "deployments",
            "*, projects(user_id, name, type)",
            filters,
            "FETCH_DEPLOYMENT_FAILED",
        )

    @classmethod
    def fetch_active_deployment_by_key(cls, api_key: str) -> dict[str, Any] | None:
        """
        Find the single active deployment whose embedded config key matches.

        The key is compared by equality against deployment_config->>api_key.
        Inactive or errored deployments never match.
        """
        return cls._fetch_single(
            "deployments",
            "id, status, deployment_config",
            {"deployment_config->>api_key": api_key, "status": "active"},
            "FETCH_DEPLOYMENT_BY_KEY_FAILED",
        )

    # -------------------------------------------------------------------------
    # Analytics
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_analytics_row(
        cls,
        deployment_id: str | UUID,
        date: str,
    ) -> dict[str, Any] | None:
        """Fetch the analytics row for one deployment and calendar day."""
        return cls._fetch_single(
            "analytics",
            "*",
            {"deployment_id": cls._normalize_uuid(deployment_id), "date": date},
            "FETCH_ANALYTICS_FAILED",
        )

    @classmethod
    def fetch_recent_analytics(
        cls,
        deployment_id: str | UUID,
        limit: int = 7,
    ) -> list[dict[str, Any]]:
        """
        Fetch the most recent analytics rows for a deployment.

        Returns:
            Rows ordered newest day first
        """
        client = cls.get_client()
        deployment_id_str = cls._normalize_uuid(deployment_id)

        try:
            response = (
                client.table("analytics")
                .select("*")
                .eq("deployment_id", deployment_id_str)
                .order("date", desc=True)
                .limit(limit)
                .execute()
            )
            rows = response.data or []
            logger.debug(f"Fetched {len(rows)} analytics rows for deployment {deployment_id_str}")
            return rows

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch analytics: {e}",
                code="FETCH_ANALYTICS_FAILED",
                details={"deployment_id": deployment_id_str, "limit": limit}
            )
