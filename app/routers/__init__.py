# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - projects.py: Project CRUD
# - data_sources.py: Data source registration, processing and preview
# - models.py: Model catalog
# - inference.py: Builder test inference
# - deployments.py: Deployment management (owner-facing)
# - analytics.py: Usage analytics query
# - deployed.py: Public API-key authenticated endpoints
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import projects
from . import data_sources
from . import models
from . import inference
from . import deployments
from . import analytics
from . import deployed

__all__ = [
    "health",
    "projects",
    "data_sources",
    "models",
    "inference",
    "deployments",
    "analytics",
    "deployed",
]
