# =============================================================================
# app/ - HTTP Surface of the App Builder
# =============================================================================
# Two audiences share one FastAPI application:
# - builders, authenticated by their Supabase session, who manage projects,
#   data sources, deployments and analytics under /api/v1
# - callers of a deployed app, authenticated by its "aib_" API key, who hit
#   /api/v1/deployed/{deployment_id}
#
# Routers translate requests and errors; everything else lives in core/,
# ai/ and ingestion/.
# =============================================================================
