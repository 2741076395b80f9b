# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the AI App Builder API:
# - test_model_registry.py / test_providers.py: Model catalog and provider clients
# - test_task_handlers.py: Task prompts, parsing and fallbacks
# - test_processors.py: CSV / JSON / text / API ingestion
# - test_services.py / test_analytics.py / test_deployment_engine.py: Services
# - test_models.py: Pydantic model validation
# - test_api.py: HTTP endpoints via TestClient
#
# Run tests with: pytest
# =============================================================================
