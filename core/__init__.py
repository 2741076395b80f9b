# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains framework-agnostic business logic:
# - models/: Pydantic schemas for projects, data sources, deployments,
#   analytics and ingestion output
# - services/: Project, data source, analytics and deployment operations
#
# Code in this package should NOT depend on FastAPI request handling.
# This keeps the logic testable and reusable.
# =============================================================================
