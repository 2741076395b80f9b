# =============================================================================
# core/services/deployment_service.py - Deployment Gateway
# =============================================================================
# DeploymentEngine turns a project into a live, keyed endpoint and serves
# calls against it.
#
# Lifecycle of a deployment row:
#   deploy()  -> inserted as "deploying", endpoint_url set, then "active"
#   stop()    -> "inactive" (idempotent)
#   update_deployment() -> config merged, back to "active"
#
# Authorization of the public endpoint is the opaque API key embedded in
# deployment_config. It is generated once, returned once by deploy(), and
# matched by equality against active deployments only.
#
# Rate-limit and scaling blocks are stored with the deployment but are not
# enforced here.
#
# Usage:
#   engine = DeploymentEngine(task_handler, site_url=settings.site_url)
#   result = engine.deploy(DeploymentConfig(project_id=..., version=1, model_id=...))
#   outcome = engine.execute(result.deployment_id, {"text": "Great!"}, result.api_key)
# =============================================================================

import logging
import secrets
import string
import time
from typing import Any
from uuid import UUID

from pydantic import ValidationError

from ai.task_handlers import TaskHandler
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import ApplicationError, normalize_uuid, utc_now, utc_now_iso
from core.models.deployment import (
    DeploymentConfig,
    DeploymentResult,
    DeploymentStatus,
    ExecutionResult,
    ExecutionUsage,
)
from core.models.project import ProjectStatus
from core.models.task import TaskConfig
from core.services.analytics_service import AnalyticsService
from core.services.project_service import ProjectService
from app.exceptions import (
    AppBuilderException,
    DeploymentError,
    DeploymentNotFoundError,
    InvalidApiKeyError,
    ProjectNotFoundError,
)

logger = logging.getLogger(__name__)

API_KEY_PREFIX = "aib_"
API_KEY_BYTES = 32

REQUEST_ID_ALPHABET = string.digits + string.ascii_lowercase
REQUEST_ID_SUFFIX_LENGTH = 9

# Analytics rows returned by the public status endpoint
STATUS_ANALYTICS_DAYS = 7


def generate_api_key() -> str:
    """Fresh key: "aib_" followed by 64 hex characters from a CSPRNG."""
    return API_KEY_PREFIX + secrets.token_hex(API_KEY_BYTES)


def generate_request_id() -> str:
    """req_<epoch-ms>_<9 base36 characters>."""
    epoch_ms = int(utc_now().timestamp() * 1000)
    suffix = "".join(secrets.choice(REQUEST_ID_ALPHABET) for _ in range(REQUEST_ID_SUFFIX_LENGTH))
    return f"req_{epoch_ms}_{suffix}"


def _elapsed_ms(start: float) -> int:
    return max(0, int((time.perf_counter() - start) * 1000))


class DeploymentEngine:
    """
    Creates, serves and manages deployments.

    Attributes:
        task_handler: Runs the AI task behind each deployed endpoint
        site_url: Public base URL used to build endpoint URLs
    """

    def __init__(self, task_handler: TaskHandler, site_url: str):
        self.task_handler = task_handler
        self.site_url = site_url.rstrip("/")

    def endpoint_url_for(self, deployment_id: str) -> str:
        return f"{self.site_url}/api/deployed/{deployment_id}"

    # -------------------------------------------------------------------------
    # Deploy
    # -------------------------------------------------------------------------

    def next_version(self, project_id: str | UUID) -> int:
        """Highest existing version for the project + 1, starting at 1."""
        client = SupabaseClient.get_client()
        response = (
            client.table("deployments")
            .select("version")
            .eq("project_id", normalize_uuid(project_id))
            .order("version", desc=True)
            .limit(1)
            .execute()
        )
        rows = response.data or []
        return (rows[0].get("version") or 0) + 1 if rows else 1

    def deploy(self, config: DeploymentConfig) -> DeploymentResult:
        """
        Create a deployment and bring it live.

        Steps:
        1. Check the project exists
        2. Generate the API key
        3. Insert the row as "deploying" with the config blob
        4. Set endpoint_url and flip to "active"
        5. Seed today's zeroed analytics row
        6. Mark the project deployed

        A failure after step 3 leaves the row in "error".

        Returns:
            DeploymentResult carrying the plaintext key (shown only once)

        Raises:
            ProjectNotFoundError: If the project doesn't exist
            DeploymentError: If any store write fails
        """
        project = SupabaseClient.fetch_project(config.project_id)
        if not project:
            raise ProjectNotFoundError(config.project_id)

        api_key = generate_api_key()
        client = SupabaseClient.get_client()
        deployment_id = None

        try:
            response = client.table("deployments").insert({
                "project_id": config.project_id,
                "version": config.version,
                "status": DeploymentStatus.DEPLOYING.value,
                "deployment_config": {
                    "model_id": config.model_id,
                    "model_parameters": config.model_parameters.model_dump(),
                    "scaling": config.scaling.model_dump(),
                    "rate_limit": config.rate_limit.model_dump(),
                    "api_key": api_key,
                    "deployed_at": utc_now_iso(),
                },
            }).execute()

            if not response.data:
                raise Exception("Failed to create deployment record")
            deployment = response.data[0]
            deployment_id = str(deployment["id"])

            endpoint_url = self.endpoint_url_for(deployment_id)
            client.table("deployments").update({
                "endpoint_url": endpoint_url,
                "status": DeploymentStatus.ACTIVE.value,
            }).eq("id", deployment_id).execute()

            AnalyticsService.seed_day(deployment_id)

            ProjectService.set_status(config.project_id, ProjectStatus.DEPLOYED)

        except Exception as e:
            logger.error(f"Deployment of project {config.project_id} failed: {e}")
            if deployment_id is not None:
                self._mark_failed(deployment_id)
            raise DeploymentError("Deployment", str(e) or "Unknown error") from e

        logger.info(f"Deployed project {config.project_id} v{config.version} as {deployment_id}")

        return DeploymentResult(
            deployment_id=deployment_id,
            endpoint_url=endpoint_url,
            api_key=api_key,
            status=DeploymentStatus.ACTIVE,
            version=config.version,
            created_at=deployment.get("created_at"),
        )

    def _mark_failed(self, deployment_id: str) -> None:
        """Move a half-created deployment to "error" so its key stops resolving."""
        try:
            SupabaseClient.get_client().table("deployments").update({
                "status": DeploymentStatus.ERROR.value,
            }).eq("id", deployment_id).execute()
        except Exception as e:
            # The original failure is what the caller sees
            logger.error(f"Could not mark deployment {deployment_id} as error: {e}")

    # -------------------------------------------------------------------------
    # Serve
    # -------------------------------------------------------------------------

    def validate_api_key(self, api_key: str) -> str | None:
        """
        Resolve a key to the id of the active deployment that owns it.

        Returns None for unknown keys and for keys of inactive/errored
        deployments. Store failures also resolve to None.
        """
        if not api_key:
            return None
        try:
            deployment = SupabaseClient.fetch_active_deployment_by_key(api_key)
        except SupabaseClientError as e:
            logger.error(f"API key validation failed: {e}")
            return None
        return str(deployment["id"]) if deployment else None

    def execute(
        self,
        deployment_id: str,
        payload: dict[str, Any],
        api_key: str,
    ) -> ExecutionResult:
        """
        Serve one call to a deployed endpoint.

        Handled failures (bad key, inactive deployment, unsupported task,
        bad input, provider error) come back as success=False with the
        error message. Every call, successful or not, is counted in the
        deployment's analytics.

        Raises:
            Exception: Only for unexpected failures, after counting them
        """
        start = time.perf_counter()
        request_id = generate_request_id()

        try:
            if self.validate_api_key(api_key) != deployment_id:
                raise InvalidApiKeyError()

            deployment = SupabaseClient.fetch_deployment(deployment_id, active_only=True)
            if not deployment:
                raise DeploymentNotFoundError(deployment_id)

            config = deployment.get("deployment_config") or {}
            parameters = config.get("model_parameters") or {}
            project_type = (deployment.get("projects") or {}).get("type")

            task_config = TaskConfig(
                model_id=config.get("model_id"),
                temperature=parameters.get("temperature"),
                max_tokens=parameters.get("max_tokens"),
            )
            result = self.task_handler.dispatch(project_type, payload, task_config)

        except (AppBuilderException, ApplicationError, ValidationError) as e:
            processing_time = _elapsed_ms(start)
            logger.info(f"Deployed call {request_id} to {deployment_id} failed: {e}")
            AnalyticsService.record_request(deployment_id, False, processing_time)
            return ExecutionResult(
                success=False,
                error=str(e) or "Unknown error",
                usage=ExecutionUsage(request_id=request_id, processing_time=processing_time),
            )
        except Exception:
            AnalyticsService.record_request(deployment_id, False, _elapsed_ms(start))
            raise

        processing_time = _elapsed_ms(start)
        AnalyticsService.record_request(deployment_id, True, processing_time)

        return ExecutionResult(
            success=True,
            data=result,
            usage=ExecutionUsage(
                request_id=request_id,
                processing_time=processing_time,
                tokens_used=result.usage.total_tokens if result.usage else None,
            ),
        )

    # -------------------------------------------------------------------------
    # Manage
    # -------------------------------------------------------------------------

    def stop(self, deployment_id: str | UUID) -> None:
        """Mark a deployment inactive. Stopping a stopped deployment is a no-op."""
        client = SupabaseClient.get_client()
        try:
            client.table("deployments").update({
                "status": DeploymentStatus.INACTIVE.value,
            }).eq("id", normalize_uuid(deployment_id)).execute()
        except Exception as e:
            logger.error(f"Stopping deployment {deployment_id} failed: {e}")
            raise DeploymentError("Stop", str(e) or "Unknown error") from e

        logger.info(f"Stopped deployment {deployment_id}")

    def update_deployment(
        self,
        deployment_id: str | UUID,
        partial: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Merge `partial` into the stored config and reactivate.

        The API key is never replaced by an update.

        Returns:
            The merged deployment_config

        Raises:
            DeploymentNotFoundError: If the deployment doesn't exist
            DeploymentError: If the write fails
        """
        deployment = SupabaseClient.fetch_deployment(deployment_id)
        if not deployment:
            raise DeploymentNotFoundError(str(deployment_id))

        stored = deployment.get("deployment_config") or {}
        partial = {k: v for k, v in partial.items() if k != "api_key"}
        merged = {**stored, **partial, "updated_at": utc_now_iso()}

        client = SupabaseClient.get_client()
        try:
            client.table("deployments").update({
                "deployment_config": merged,
                "status": DeploymentStatus.ACTIVE.value,
            }).eq("id", normalize_uuid(deployment_id)).execute()
        except Exception as e:
            logger.error(f"Updating deployment {deployment_id} failed: {e}")
            raise DeploymentError("Update", str(e) or "Unknown error") from e

        logger.info(f"Updated deployment {deployment_id}: {sorted(partial)}")
        return merged

    def get_status(
        self,
        deployment_id: str | UUID,
        analytics_days: int = STATUS_ANALYTICS_DAYS,
    ) -> dict[str, Any]:
        """
        Deployment row with project name/type and recent analytics.

        Raises:
            DeploymentNotFoundError: If the deployment doesn't exist
        """
        deployment = SupabaseClient.fetch_deployment(deployment_id)
        if not deployment:
            raise DeploymentNotFoundError(str(deployment_id))

        analytics = SupabaseClient.fetch_recent_analytics(deployment_id, limit=analytics_days)
        return {**deployment, "analytics": analytics}

    # -------------------------------------------------------------------------
    # Owner Views (management API)
    # -------------------------------------------------------------------------

    def require_owner(self, deployment_id: str | UUID, user_id: UUID | str) -> dict[str, Any]:
        """
        Fetch a deployment, hiding it from anyone but its project's owner.

        Raises:
            DeploymentNotFoundError: Missing, or owned by someone else
        """
        deployment = SupabaseClient.fetch_deployment(deployment_id)
        owner = ((deployment or {}).get("projects") or {}).get("user_id")
        if not deployment or str(owner) != str(user_id):
            raise DeploymentNotFoundError(str(deployment_id))
        return deployment

    def get_owned(
        self,
        deployment_id: str | UUID,
        user_id: UUID | str,
        analytics_days: int = 30,
    ) -> dict[str, Any]:
        """get_status() restricted to the owner, with a longer analytics window."""
        deployment = self.require_owner(deployment_id, user_id)
        analytics = SupabaseClient.fetch_recent_analytics(deployment_id, limit=analytics_days)
        return {**deployment, "analytics": analytics}

    def list_deployments(
        self,
        user_id: UUID | str,
        project_id: str | UUID | None = None,
    ) -> list[dict[str, Any]]:
        """A user's deployments (optionally one project's), newest first."""
        client = SupabaseClient.get_client()
        query = (
            client.table("deployments")
            .select("*, projects!inner(name, type, user_id)")
            .eq("projects.user_id", normalize_uuid(user_id))
        )
        if project_id:
            query = query.eq("project_id", normalize_uuid(project_id))

        response = query.order("created_at", desc=True).execute()
        return response.data or []
