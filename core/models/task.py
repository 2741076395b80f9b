# =============================================================================
# core/models/task.py - AI Task Schemas
# =============================================================================
# These models define the contract for running an AI task:
# - TaskKind: The fixed enumeration of project/task types
# - TaskConfig: Model id plus optional generation overrides
# - TokenUsage: Token counters reported by a provider
# - TaskResult: Structured output of a task handler
#
# Example:
#   config = TaskConfig(model_id="cerebras-llama-3.1-8b", temperature=0.2)
#   result = task_handler.execute_sentiment_analysis("Great product!", config)
#   print(result.result["sentiment"], result.confidence)
# =============================================================================

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TaskKind(str, Enum):
    """
    Kinds of AI application a project can be.

    The kind determines prompt shape, expected input payload and
    result structure.
    """
    SENTIMENT_ANALYSIS = "sentiment_analysis"
    TEXT_CLASSIFICATION = "text_classification"
    NAMED_ENTITY_RECOGNITION = "named_entity_recognition"
    TEXT_SUMMARIZATION = "text_summarization"
    QUESTION_ANSWERING = "question_answering"
    CHATBOT = "chatbot"
    CONTENT_GENERATION = "content_generation"
    CUSTOM = "custom"


class TaskConfig(BaseModel):
    """
    Per-call task configuration.

    Temperature and max_tokens are independently overridable; when left
    as None each task handler applies its own default.
    """

    model_config = ConfigDict(protected_namespaces=())

    model_id: str = Field(
        ...,
        min_length=1,
        description="Registry id of the model to run"
    )

    temperature: float | None = Field(
        default=None,
        ge=0.0,
        le=2.0,
        description="Sampling temperature override"
    )

    max_tokens: int | None = Field(
        default=None,
        ge=1,
        description="Maximum output tokens override"
    )


class TokenUsage(BaseModel):
    """Token counters as reported by a chat-completion provider."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class TaskResult(BaseModel):
    """
    Output of one task handler invocation.

    Attributes:
        result: Task-specific structured payload
        confidence: Model or fallback confidence, when the task has one
        processing_time: Wall-clock milliseconds spent on the provider call
        model: Resolved registry model id
        usage: Token usage, when the provider reported it
    """

    result: dict[str, Any] = Field(default_factory=dict)

    confidence: float | None = Field(default=None)

    processing_time: int = Field(
        ...,
        ge=0,
        description="Elapsed milliseconds"
    )

    model: str = Field(..., description="Resolved registry model id")

    usage: TokenUsage | None = Field(default=None)
