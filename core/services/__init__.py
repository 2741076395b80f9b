# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .project_service import ProjectService
from .data_source_service import DataSourceService
from .analytics_service import AnalyticsService, compute_running_average
from .deployment_service import DeploymentEngine, generate_api_key, generate_request_id

__all__ = [
    "ProjectService",
    "DataSourceService",
    "AnalyticsService",
    "compute_running_average",
    "DeploymentEngine",
    "generate_api_key",
    "generate_request_id",
]
