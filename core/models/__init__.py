# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - task.py: Task kinds, task configuration and task results
# - project.py: Project CRUD schemas
# - data_source.py: Data source schemas and status enum
# - deployment.py: Deployment gateway schemas
# - analytics.py: Daily analytics rows and summaries
# - ingestion.py: Normalized records produced by data processors
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Task Models - What an AI project does
# -----------------------------------------------------------------------------
from .task import (
    TaskConfig,
    TaskKind,
    TaskResult,
    TokenUsage,
)

# -----------------------------------------------------------------------------
# Project Models
# -----------------------------------------------------------------------------
from .project import (
    ProjectCreate,
    ProjectResponse,
    ProjectStatus,
    ProjectUpdate,
)

# -----------------------------------------------------------------------------
# Data Source Models
# -----------------------------------------------------------------------------
from .data_source import (
    DataSourceCreate,
    DataSourceResponse,
    DataSourceStatus,
    DataSourceType,
)

# -----------------------------------------------------------------------------
# Deployment Models - Gateway contract
# -----------------------------------------------------------------------------
from .deployment import (
    DeploymentConfig,
    DeploymentCreate,
    DeploymentResult,
    DeploymentStatus,
    DeploymentUpdate,
    ExecutionResult,
    ExecutionUsage,
    ModelParameters,
    RateLimitConfig,
    ScalingConfig,
)

# -----------------------------------------------------------------------------
# Analytics Models
# -----------------------------------------------------------------------------
from .analytics import (
    AnalyticsRecord,
    AnalyticsSummary,
    DailyUsage,
)

# -----------------------------------------------------------------------------
# Ingestion Models
# -----------------------------------------------------------------------------
from .ingestion import (
    DataRecord,
    PreviewResult,
    ProcessingResult,
)

__all__ = [
    # Task
    "TaskConfig",
    "TaskKind",
    "TaskResult",
    "TokenUsage",
    # Project
    "ProjectCreate",
    "ProjectResponse",
    "ProjectStatus",
    "ProjectUpdate",
    # Data source
    "DataSourceCreate",
    "DataSourceResponse",
    "DataSourceStatus",
    "DataSourceType",
    # Deployment
    "DeploymentConfig",
    "DeploymentCreate",
    "DeploymentResult",
    "DeploymentStatus",
    "DeploymentUpdate",
    "ExecutionResult",
    "ExecutionUsage",
    "ModelParameters",
    "RateLimitConfig",
    "ScalingConfig",
    # Analytics
    "AnalyticsRecord",
    "AnalyticsSummary",
    "DailyUsage",
    # Ingestion
    "DataRecord",
    "PreviewResult",
    "ProcessingResult",
]
