# =============================================================================
# tests/test_models.py - Pydantic Model Tests
# =============================================================================
# Unit tests for the request/response models to ensure:
# - Valid data is accepted and parsed correctly
# - Invalid data raises ValidationError
# - Default values work as expected
#
# Run with: pytest tests/test_models.py -v
# =============================================================================

from uuid import UUID

import pytest
from pydantic import ValidationError

from core.models import (
    AnalyticsRecord,
    DataSourceCreate,
    DataSourceResponse,
    DataSourceStatus,
    DeploymentCreate,
    DeploymentUpdate,
    ModelParameters,
    ProcessingResult,
    ProjectCreate,
    ProjectResponse,
    ProjectStatus,
    RateLimitConfig,
    TaskConfig,
    TaskKind,
    TaskResult,
)


# =============================================================================
# Task Models
# =============================================================================

class TestTaskConfig:
    """Tests for TaskConfig model."""

    def test_overrides_default_to_none(self):
        config = TaskConfig(model_id="cerebras-llama-3.1-8b")

        assert config.temperature is None
        assert config.max_tokens is None

    def test_zero_temperature_is_valid(self):
        assert TaskConfig(model_id="m", temperature=0.0).temperature == 0.0

    @pytest.mark.parametrize("field,value", [
        ("temperature", 2.5),
        ("temperature", -0.1),
        ("max_tokens", 0),
    ])
    def test_out_of_range(self, field, value):
        with pytest.raises(ValidationError):
            TaskConfig(model_id="m", **{field: value})

    def test_empty_model_id(self):
        with pytest.raises(ValidationError):
            TaskConfig(model_id="")


class TestTaskResult:
    def test_processing_time_not_negative(self):
        with pytest.raises(ValidationError):
            TaskResult(result={}, processing_time=-1, model="m")

    def test_optional_fields(self):
        result = TaskResult(result={"summary": "s"}, processing_time=5, model="m")

        assert result.confidence is None
        assert result.usage is None


# =============================================================================
# Project Models
# =============================================================================

class TestProjectCreate:
    def test_valid(self):
        # Arrange
        data = {"name": "Support Bot", "type": "chatbot"}

        # Act
        project = ProjectCreate(**data)

        # Assert
        assert project.type == TaskKind.CHATBOT
        assert project.description is None

    def test_custom_kind_is_accepted(self):
        assert ProjectCreate(name="X", type="custom").type == TaskKind.CUSTOM

    def test_unknown_kind(self):
        with pytest.raises(ValidationError):
            ProjectCreate(name="X", type="translation")

    def test_blank_name(self):
        with pytest.raises(ValidationError):
            ProjectCreate(name="", type="chatbot")


class TestProjectResponse:
    def test_parses_store_row(self, project_row):
        project = ProjectResponse(**project_row)

        assert isinstance(project.id, UUID)
        assert project.status == ProjectStatus.DRAFT
        assert project.config == {"step": "data"}


# =============================================================================
# Data Source Models
# =============================================================================

class TestDataSource:
    def test_create_defaults(self):
        source = DataSourceCreate(name="Tickets", type="csv")

        assert source.source_config == {}

    def test_database_type_can_be_registered(self):
        assert DataSourceCreate(name="Warehouse", type="database").type.value == "database"

    def test_response_defaults(self):
        source = DataSourceResponse(
            id="55555555-5555-5555-5555-555555555555",
            project_id="22222222-2222-2222-2222-222222222222",
            name="Tickets",
            type="json",
        )

        assert source.status == DataSourceStatus.PENDING
        assert source.row_count == 0


# =============================================================================
# Deployment Models
# =============================================================================

class TestDeploymentModels:
    def test_create_fills_default_blocks(self):
        body = DeploymentCreate(project_id="p", model_id="cerebras-llama-3.1-8b")

        assert body.model_parameters == ModelParameters(temperature=0.7, max_tokens=2048)
        assert body.rate_limit == RateLimitConfig(requests_per_minute=100, requests_per_hour=1000)
        assert body.scaling.target_cpu == 70

    def test_model_parameters_keep_extra_keys(self):
        params = ModelParameters(temperature=0.5, max_tokens=10, top_p=0.9)

        assert params.model_dump()["top_p"] == 0.9

    def test_update_partial_config_omits_unsent_blocks(self):
        update = DeploymentUpdate(rate_limit={"requests_per_minute": 5, "requests_per_hour": 50})

        assert update.to_partial_config() == {
            "rate_limit": {"requests_per_minute": 5, "requests_per_hour": 50},
        }

    def test_update_has_no_api_key_field(self):
        update = DeploymentUpdate(api_key="aib_x")

        assert "api_key" not in update.to_partial_config()


# =============================================================================
# Analytics and Ingestion Models
# =============================================================================

class TestAnalyticsRecord:
    def test_defaults(self):
        record = AnalyticsRecord(deployment_id="d", date="2024-01-15")

        assert record.request_count == 0
        assert record.avg_response_time == 0.0

    def test_negative_counts_rejected(self):
        with pytest.raises(ValidationError):
            AnalyticsRecord(deployment_id="d", date="2024-01-15", error_count=-1)


class TestProcessingResult:
    def test_failure(self):
        result = ProcessingResult.failure("Empty CSV file")

        assert result.success is False
        assert result.records == []
        assert result.total_records == 0
        assert result.errors == ["Empty CSV file"]
