# =============================================================================
# tests/test_deployment_engine.py - Deployment Gateway Tests
# =============================================================================
# Supabase is a MagicMock (conftest.mock_supabase); single-row fetches are
# patched on SupabaseClient directly. Analytics recording is patched so
# the tests can assert on what was counted.
#
# Run with: pytest tests/test_deployment_engine.py -v
# =============================================================================

import re
from unittest.mock import call, patch

import pytest

from ai.model_registry import Provider
from ai.providers import ProviderError
from app.exceptions import DeploymentError, DeploymentNotFoundError, ProjectNotFoundError
from core.models.deployment import DeploymentConfig, DeploymentStatus, ModelParameters
from core.services.analytics_service import AnalyticsService
from core.services.deployment_service import (
    DeploymentEngine,
    generate_api_key,
    generate_request_id,
)
from lib.supabase_client import SupabaseClient, SupabaseClientError
from tests.conftest import make_generation, query_result


@pytest.fixture
def engine(task_handler):
    return DeploymentEngine(task_handler, site_url="https://builder.example.com/")


@pytest.fixture
def record_request():
    with patch.object(AnalyticsService, "record_request") as mocked:
        yield mocked


# =============================================================================
# Identifiers
# =============================================================================

class TestIdentifiers:
    def test_api_key_shape(self):
        key = generate_api_key()
        assert re.fullmatch(r"aib_[0-9a-f]{64}", key)

    def test_api_keys_are_unique(self):
        assert generate_api_key() != generate_api_key()

    def test_request_id_shape(self):
        assert re.fullmatch(r"req_\d+_[0-9a-z]{9}", generate_request_id())

    def test_endpoint_url_strips_trailing_slash(self, engine):
        assert engine.endpoint_url_for("abc") == "https://builder.example.com/api/deployed/abc"


# =============================================================================
# Deploy
# =============================================================================

class TestDeploy:
    def test_next_version_starts_at_one(self, engine, mock_supabase):
        mock_supabase.table.return_value.select.return_value.eq.return_value \
            .order.return_value.limit.return_value.execute.return_value = query_result([])

        assert engine.next_version("22222222-2222-2222-2222-222222222222") == 1

    def test_next_version_increments(self, engine, mock_supabase):
        mock_supabase.table.return_value.select.return_value.eq.return_value \
            .order.return_value.limit.return_value.execute.return_value = query_result([{"version": 4}])

        assert engine.next_version("22222222-2222-2222-2222-222222222222") == 5

    def test_deploy_creates_active_deployment(self, engine, mock_supabase, project_row):
        # Arrange
        deployment_id = "44444444-4444-4444-4444-444444444444"
        mock_supabase.table.return_value.insert.return_value.execute.return_value = query_result(
            [{"id": deployment_id, "created_at": "2024-01-15T10:30:00+00:00"}]
        )
        config = DeploymentConfig(
            project_id=project_row["id"],
            version=1,
            model_id="cerebras-llama-3.1-8b",
            model_parameters=ModelParameters(temperature=0.2, max_tokens=300),
        )

        # Act
        with patch.object(SupabaseClient, "fetch_project", return_value=project_row):
            result = engine.deploy(config)

        # Assert
        assert result.deployment_id == deployment_id
        assert result.status == DeploymentStatus.ACTIVE
        assert result.endpoint_url == f"https://builder.example.com/api/deployed/{deployment_id}"
        assert result.api_key.startswith("aib_")

        first_insert = mock_supabase.table.return_value.insert.call_args_list[0].args[0]
        assert first_insert["status"] == "deploying"
        assert first_insert["deployment_config"]["api_key"] == result.api_key
        assert first_insert["deployment_config"]["model_parameters"]["max_tokens"] == 300

        updates = [c.args[0] for c in mock_supabase.table.return_value.update.call_args_list]
        assert {"endpoint_url": result.endpoint_url, "status": "active"} in updates
        assert any(u.get("status") == "deployed" for u in updates)

        # Zeroed analytics row seeded
        seeded = mock_supabase.table.return_value.insert.call_args_list[1].args[0]
        assert seeded["request_count"] == 0

    def test_missing_project(self, engine, mock_supabase):
        config = DeploymentConfig(project_id="missing", version=1, model_id="cerebras-llama-3.1-8b")

        with patch.object(SupabaseClient, "fetch_project", return_value=None):
            with pytest.raises(ProjectNotFoundError):
                engine.deploy(config)

        mock_supabase.table.return_value.insert.assert_not_called()

    def test_store_failure_is_wrapped(self, engine, mock_supabase, project_row):
        mock_supabase.table.return_value.insert.return_value.execute.return_value = query_result([])
        config = DeploymentConfig(project_id=project_row["id"], version=1, model_id="cerebras-llama-3.1-8b")

        with patch.object(SupabaseClient, "fetch_project", return_value=project_row):
            with pytest.raises(DeploymentError) as exc_info:
                engine.deploy(config)

        assert str(exc_info.value) == "Deployment failed: Failed to create deployment record"
        mock_supabase.table.return_value.update.assert_not_called()

    def test_failed_activation_marks_error(self, engine, mock_supabase, project_row):
        # Arrange
        deployment_id = "44444444-4444-4444-4444-444444444444"
        mock_supabase.table.return_value.insert.return_value.execute.return_value = query_result(
            [{"id": deployment_id}]
        )
        mock_supabase.table.return_value.update.return_value.eq.return_value \
            .execute.side_effect = [RuntimeError("statement timeout"), query_result([])]
        config = DeploymentConfig(project_id=project_row["id"], version=1, model_id="cerebras-llama-3.1-8b")

        # Act
        with patch.object(SupabaseClient, "fetch_project", return_value=project_row):
            with pytest.raises(DeploymentError) as exc_info:
                engine.deploy(config)

        # Assert
        assert str(exc_info.value) == "Deployment failed: statement timeout"
        statuses = [c.args[0]["status"] for c in mock_supabase.table.return_value.update.call_args_list]
        assert statuses == ["active", "error"]
        mock_supabase.table.return_value.update.return_value.eq.assert_called_with("id", deployment_id)

    def test_failure_after_activation_marks_error(self, engine, mock_supabase, project_row):
        mock_supabase.table.return_value.insert.return_value.execute.return_value = query_result(
            [{"id": "44444444-4444-4444-4444-444444444444"}]
        )
        config = DeploymentConfig(project_id=project_row["id"], version=1, model_id="cerebras-llama-3.1-8b")

        with patch.object(SupabaseClient, "fetch_project", return_value=project_row):
            with patch.object(AnalyticsService, "seed_day", side_effect=RuntimeError("analytics down")):
                with pytest.raises(DeploymentError):
                    engine.deploy(config)

        statuses = [c.args[0].get("status") for c in mock_supabase.table.return_value.update.call_args_list]
        assert statuses == ["active", "error"]

    def test_error_mark_failure_keeps_original_error(self, engine, mock_supabase, project_row):
        mock_supabase.table.return_value.insert.return_value.execute.return_value = query_result(
            [{"id": "44444444-4444-4444-4444-444444444444"}]
        )
        mock_supabase.table.return_value.update.return_value.eq.return_value \
            .execute.side_effect = RuntimeError("connection reset")
        config = DeploymentConfig(project_id=project_row["id"], version=1, model_id="cerebras-llama-3.1-8b")

        with patch.object(SupabaseClient, "fetch_project", return_value=project_row):
            with pytest.raises(DeploymentError) as exc_info:
                engine.deploy(config)

        assert str(exc_info.value) == "Deployment failed: connection reset"
        assert mock_supabase.table.return_value.update.call_count == 2


# =============================================================================
# API Keys
# =============================================================================

class TestValidateApiKey:
    def test_active_key_resolves(self, engine, deployment_row):
        with patch.object(SupabaseClient, "fetch_active_deployment_by_key", return_value=deployment_row):
            assert engine.validate_api_key(deployment_row["deployment_config"]["api_key"]) == deployment_row["id"]

    def test_inactive_or_unknown_key(self, engine):
        with patch.object(SupabaseClient, "fetch_active_deployment_by_key", return_value=None):
            assert engine.validate_api_key("aib_unknown") is None

    def test_lookup_filters_on_key_and_active_status(self, engine, mock_supabase, deployment_row):
        # Arrange
        api_key = deployment_row["deployment_config"]["api_key"]
        select = mock_supabase.table.return_value.select
        query = select.return_value
        query.eq.return_value = query
        query.single.return_value.execute.return_value = query_result(deployment_row)

        # Act
        resolved = engine.validate_api_key(api_key)

        # Assert
        assert resolved == deployment_row["id"]
        mock_supabase.table.assert_called_with("deployments")
        assert query.eq.call_args_list == [
            call("deployment_config->>api_key", api_key),
            call("status", "active"),
        ]

    def test_no_active_row_for_key(self, engine, mock_supabase):
        query = mock_supabase.table.return_value.select.return_value
        query.eq.return_value = query
        query.single.return_value.execute.side_effect = Exception(
            "{'code': 'PGRST116', 'message': 'JSON object requested, multiple (or no) rows returned'}"
        )

        assert engine.validate_api_key("aib_" + "cd" * 32) is None

    def test_empty_key_skips_lookup(self, engine):
        with patch.object(SupabaseClient, "fetch_active_deployment_by_key") as lookup:
            assert engine.validate_api_key("") is None
        lookup.assert_not_called()

    def test_store_failure_is_none(self, engine):
        error = SupabaseClientError("down")
        with patch.object(SupabaseClient, "fetch_active_deployment_by_key", side_effect=error):
            assert engine.validate_api_key("aib_x") is None


# =============================================================================
# Execute
# =============================================================================

class TestExecute:
    @pytest.fixture
    def live(self, deployment_row):
        """Patch the key lookup and deployment fetch to serve deployment_row."""
        with patch.object(SupabaseClient, "fetch_active_deployment_by_key", return_value=deployment_row), \
                patch.object(SupabaseClient, "fetch_deployment", return_value=deployment_row):
            yield deployment_row

    def test_success(self, engine, live, provider_clients, record_request):
        # Arrange
        provider_clients[Provider.CEREBRAS].generate.return_value = make_generation(
            '{"sentiment": "positive", "confidence": 0.9, "reasoning": "x"}', total_tokens=57
        )
        api_key = live["deployment_config"]["api_key"]

        # Act
        outcome = engine.execute(live["id"], {"text": "Love it"}, api_key)

        # Assert
        assert outcome.success is True
        assert outcome.data.result["sentiment"] == "positive"
        assert outcome.usage.tokens_used == 57
        assert outcome.usage.request_id.startswith("req_")

        call = provider_clients[Provider.CEREBRAS].generate.call_args
        assert call.kwargs["temperature"] == 0.2
        assert call.kwargs["max_tokens"] == 300

        record_request.assert_called_once()
        assert record_request.call_args.args[:2] == (live["id"], True)

    def test_key_of_another_deployment(self, engine, live, record_request):
        outcome = engine.execute("99999999-9999-9999-9999-999999999999", {"text": "hi"}, "aib_other")

        assert outcome.success is False
        assert outcome.error == "Invalid API key"
        assert outcome.data is None
        assert record_request.call_args.args[1] is False

    def test_missing_input_is_handled(self, engine, live, record_request):
        outcome = engine.execute(live["id"], {}, live["deployment_config"]["api_key"])

        assert outcome.success is False
        assert "text" in outcome.error
        assert record_request.call_args.args[1] is False

    def test_provider_error_is_handled(self, engine, live, provider_clients, record_request):
        provider_clients[Provider.CEREBRAS].generate.side_effect = ProviderError(
            Provider.CEREBRAS, 500, "Internal Server Error"
        )

        outcome = engine.execute(live["id"], {"text": "hi"}, live["deployment_config"]["api_key"])

        assert outcome.success is False
        assert outcome.error == "Cerebras API error: 500 Internal Server Error"

    def test_unsupported_project_type(self, engine, deployment_row, record_request):
        deployment_row["projects"]["type"] = "custom"
        with patch.object(SupabaseClient, "fetch_active_deployment_by_key", return_value=deployment_row), \
                patch.object(SupabaseClient, "fetch_deployment", return_value=deployment_row):
            outcome = engine.execute(deployment_row["id"], {"text": "hi"}, "aib_key")

        assert outcome.error == "Unsupported project type: custom"

    def test_unexpected_error_is_counted_then_raised(self, engine, live, provider_clients, record_request):
        provider_clients[Provider.CEREBRAS].generate.side_effect = RuntimeError("bug")

        with pytest.raises(RuntimeError):
            engine.execute(live["id"], {"text": "hi"}, live["deployment_config"]["api_key"])

        assert record_request.call_args.args[1] is False


# =============================================================================
# Manage
# =============================================================================

class TestManage:
    def test_stop_is_idempotent(self, engine, mock_supabase):
        engine.stop("33333333-3333-3333-3333-333333333333")
        engine.stop("33333333-3333-3333-3333-333333333333")

        updates = [c.args[0] for c in mock_supabase.table.return_value.update.call_args_list]
        assert updates == [{"status": "inactive"}, {"status": "inactive"}]

    def test_stop_failure(self, engine, mock_supabase):
        mock_supabase.table.return_value.update.return_value.eq.return_value \
            .execute.side_effect = RuntimeError("down")

        with pytest.raises(DeploymentError) as exc_info:
            engine.stop("33333333-3333-3333-3333-333333333333")
        assert str(exc_info.value) == "Stop failed: down"

    def test_update_merges_and_keeps_key(self, engine, mock_supabase, deployment_row):
        original_key = deployment_row["deployment_config"]["api_key"]

        with patch.object(SupabaseClient, "fetch_deployment", return_value=deployment_row):
            merged = engine.update_deployment(deployment_row["id"], {
                "model_parameters": {"temperature": 0.9, "max_tokens": 100},
                "api_key": "aib_hijack",
            })

        assert merged["api_key"] == original_key
        assert merged["model_parameters"]["temperature"] == 0.9
        assert merged["model_id"] == "cerebras-llama-3.1-8b"
        assert "updated_at" in merged

        written = mock_supabase.table.return_value.update.call_args.args[0]
        assert written["status"] == "active"
        assert written["deployment_config"] == merged

    def test_update_missing_deployment(self, engine, mock_supabase):
        with patch.object(SupabaseClient, "fetch_deployment", return_value=None):
            with pytest.raises(DeploymentNotFoundError):
                engine.update_deployment("missing", {"model_id": "x"})

    def test_get_status_includes_analytics(self, engine, deployment_row):
        analytics = [{"date": "2024-01-15", "request_count": 3}]

        with patch.object(SupabaseClient, "fetch_deployment", return_value=deployment_row), \
                patch.object(SupabaseClient, "fetch_recent_analytics", return_value=analytics) as recent:
            status = engine.get_status(deployment_row["id"])

        assert status["analytics"] == analytics
        assert status["projects"]["name"] == "Review Sentiment"
        assert recent.call_args.kwargs["limit"] == 7

    def test_require_owner_hides_foreign_deployments(self, engine, deployment_row):
        with patch.object(SupabaseClient, "fetch_deployment", return_value=deployment_row):
            with pytest.raises(DeploymentNotFoundError):
                engine.require_owner(deployment_row["id"], "someone-else")

    def test_get_owned_uses_thirty_days(self, engine, deployment_row, user_id):
        with patch.object(SupabaseClient, "fetch_deployment", return_value=deployment_row), \
                patch.object(SupabaseClient, "fetch_recent_analytics", return_value=[]) as recent:
            engine.get_owned(deployment_row["id"], user_id)

        assert recent.call_args.kwargs["limit"] == 30
