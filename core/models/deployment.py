# =============================================================================
# core/models/deployment.py - Deployment Schemas
# =============================================================================
# These models define the contract for the deployment gateway:
# - DeploymentStatus: deploying -> active -> inactive, or deploying -> error
# - DeploymentCreate / DeploymentUpdate: management API request bodies
# - DeploymentConfig: Everything deploy() needs, including the version
# - DeploymentResult: Returned once by deploy(), carries the plaintext key
# - ExecutionResult: Outcome of a call to a deployed endpoint
#
# The stored deployment_config JSONB blob looks like:
#   {
#       "model_id": "cerebras-llama-3.1-8b",
#       "model_parameters": {"temperature": 0.7, "max_tokens": 2048},
#       "scaling": {"min_instances": 1, "max_instances": 10, "target_cpu": 70},
#       "rate_limit": {"requests_per_minute": 100, "requests_per_hour": 1000},
#       "api_key": "aib_...",
#       "deployed_at": "2024-01-15T10:30:00+00:00"
#   }
# Scaling and rate_limit are stored for display only and are not enforced.
# =============================================================================

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .task import TaskResult


class DeploymentStatus(str, Enum):
    """
    Possible states for a deployment.

    Flow: deploying -> active -> inactive (stopped)
                   \\-> error
    Nothing leaves inactive or error back to active except an owner update.
    """
    DEPLOYING = "deploying"
    ACTIVE = "active"
    INACTIVE = "inactive"
    ERROR = "error"


# =============================================================================
# Configuration Blocks
# =============================================================================

class ModelParameters(BaseModel):
    """Generation parameters stored with a deployment."""

    model_config = ConfigDict(extra="allow")

    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=2048, ge=1)


class ScalingConfig(BaseModel):
    """Scaling hints (advisory)."""
    min_instances: int = Field(default=1, ge=0)
    max_instances: int = Field(default=10, ge=1)
    target_cpu: int = Field(default=70, ge=1, le=100)


class RateLimitConfig(BaseModel):
    """Rate-limit hints (advisory, not enforced)."""
    requests_per_minute: int = Field(default=100, ge=1)
    requests_per_hour: int = Field(default=1000, ge=1)


# =============================================================================
# Requests
# =============================================================================

class DeploymentCreate(BaseModel):
    """Body of POST /deployments."""

    project_id: str = Field(..., description="Project to deploy")

    model_id: str = Field(..., min_length=1, description="Registry model id")

    model_parameters: ModelParameters = Field(default_factory=ModelParameters)

    scaling: ScalingConfig = Field(default_factory=ScalingConfig)

    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)

    model_config = {
        "protected_namespaces": (),
        "json_schema_extra": {
            "example": {
                "project_id": "550e8400-e29b-41d4-a716-446655440000",
                "model_id": "cerebras-llama-3.1-8b",
                "model_parameters": {"temperature": 0.3, "max_tokens": 500},
            }
        },
    }


class DeploymentUpdate(BaseModel):
    """Body of PUT /deployments/{id}; omitted blocks are left untouched."""

    model_config = ConfigDict(protected_namespaces=())

    model_id: str | None = Field(default=None, min_length=1)
    model_parameters: ModelParameters | None = None
    scaling: ScalingConfig | None = None
    rate_limit: RateLimitConfig | None = None

    def to_partial_config(self) -> dict[str, Any]:
        """Only the blocks the caller sent, ready to merge into the stored blob."""
        return self.model_dump(exclude_none=True, mode="json")


class DeploymentConfig(BaseModel):
    """Everything the gateway needs to create one deployment."""

    model_config = ConfigDict(protected_namespaces=())

    project_id: str
    version: int = Field(..., ge=1)
    model_id: str
    model_parameters: ModelParameters = Field(default_factory=ModelParameters)
    scaling: ScalingConfig = Field(default_factory=ScalingConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)


# =============================================================================
# Results
# =============================================================================

class DeploymentResult(BaseModel):
    """
    Returned by DeploymentEngine.deploy().

    The api_key is only ever returned here - it is not shown again.
    """
    deployment_id: str
    endpoint_url: str
    api_key: str
    status: DeploymentStatus
    version: int
    created_at: str | None = None


class ExecutionUsage(BaseModel):
    """Usage envelope returned with every deployed-endpoint call."""
    request_id: str
    processing_time: int = Field(..., ge=0)
    tokens_used: int | None = None


class ExecutionResult(BaseModel):
    """Outcome of DeploymentEngine.execute()."""
    success: bool
    data: TaskResult | None = None
    error: str | None = None
    usage: ExecutionUsage
