# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Fake provider clients so no test talks to a hosted model
# - A MagicMock Supabase client patched into the SupabaseClient wrapper
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("CEREBRAS_API_KEY", "test-cerebras-key")
os.environ.setdefault("SAMBANOVA_API_KEY", "test-sambanova-key")
os.environ.setdefault("SITE_URL", "https://builder.example.com")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from unittest.mock import MagicMock, patch

import pytest

from ai.model_registry import Provider
from ai.providers import ChatCompletionProvider, Generation, ProviderRegistry, cerebras_spec, sambanova_spec
from ai.task_handlers import TaskHandler
from core.models.task import TokenUsage
from lib.supabase_client import SupabaseClient


# =============================================================================
# Provider Fixtures
# =============================================================================

def make_generation(text: str, total_tokens: int = 42) -> Generation:
    """A provider response with the given text and token usage."""
    return Generation(
        text=text,
        usage=TokenUsage(prompt_tokens=total_tokens - 10, completion_tokens=10, total_tokens=total_tokens),
    )


@pytest.fixture
def provider_clients():
    """
    Real ChatCompletionProvider objects whose generate() is mocked.

    Returns:
        {Provider: ChatCompletionProvider}; set `.generate.return_value`
        on a client to script its reply.
    """
    clients = {
        Provider.CEREBRAS: ChatCompletionProvider(cerebras_spec("test-key"), client=MagicMock()),
        Provider.SAMBANOVA: ChatCompletionProvider(sambanova_spec("test-key"), client=MagicMock()),
    }
    for client in clients.values():
        client.generate = MagicMock(return_value=make_generation(""))
    return clients


@pytest.fixture
def provider_registry(provider_clients):
    return ProviderRegistry(provider_clients)


@pytest.fixture
def task_handler(provider_registry):
    return TaskHandler(provider_registry)


# =============================================================================
# Supabase Fixtures
# =============================================================================

@pytest.fixture
def mock_supabase():
    """
    Patch SupabaseClient.get_client() with a MagicMock client.

    Chained query builders all return the same MagicMock, so set
    `client.table.return_value.<op>.return_value.execute.return_value`
    (or use `query_result`) to script a response.
    """
    client = MagicMock()
    with patch.object(SupabaseClient, "get_client", return_value=client):
        yield client


def query_result(data):
    """Stand-in for a postgrest APIResponse."""
    response = MagicMock()
    response.data = data
    response.count = len(data) if isinstance(data, list) else None
    return response


# =============================================================================
# Data Fixtures
# =============================================================================

@pytest.fixture
def user_id():
    return "11111111-1111-1111-1111-111111111111"


@pytest.fixture
def project_row(user_id):
    return {
        "id": "22222222-2222-2222-2222-222222222222",
        "user_id": user_id,
        "name": "Review Sentiment",
        "description": "Classify product reviews",
        "type": "sentiment_analysis",
        "status": "draft",
        "config": {"step": "data"},
        "created_at": "2024-01-15T10:30:00+00:00",
        "updated_at": "2024-01-15T10:30:00+00:00",
    }


@pytest.fixture
def deployment_row(user_id):
    return {
        "id": "33333333-3333-3333-3333-333333333333",
        "project_id": "22222222-2222-2222-2222-222222222222",
        "version": 2,
        "status": "active",
        "endpoint_url": "https://builder.example.com/api/deployed/33333333-3333-3333-3333-333333333333",
        "deployment_config": {
            "model_id": "cerebras-llama-3.1-8b",
            "model_parameters": {"temperature": 0.2, "max_tokens": 300},
            "scaling": {"min_instances": 1, "max_instances": 10, "target_cpu": 70},
            "rate_limit": {"requests_per_minute": 100, "requests_per_hour": 1000},
            "api_key": "aib_" + "ab" * 32,
            "deployed_at": "2024-01-15T10:30:00+00:00",
        },
        "created_at": "2024-01-15T10:30:00+00:00",
        "projects": {"user_id": user_id, "name": "Review Sentiment", "type": "sentiment_analysis"},
    }
