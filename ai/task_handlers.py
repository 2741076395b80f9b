# =============================================================================
# ai/task_handlers.py - AI Task Dispatcher
# =============================================================================
# One operation per task kind. Every operation has the same shape:
# 1. Resolve the model id against the registry
# 2. Build a deterministic prompt embedding the input verbatim
# 3. Route to the provider client matching the model's provider
# 4. Time the call and normalize the output into a TaskResult
#
# Result parsing:
# - Sentiment, classification and entity extraction ask for JSON. If the
#   output does not parse, a keyword heuristic with a fixed confidence is
#   used instead of failing the request.
# - Summarization, question answering, content generation and chat never
#   parse JSON; they return the trimmed text plus derived metrics.
#
# Nothing is retried. A ProviderError propagates to the caller.
#
# Usage:
#   handler = TaskHandler(ProviderRegistry.from_settings(settings))
#   result = handler.dispatch("sentiment_analysis", {"text": "Love it"}, config)
# =============================================================================

from __future__ import annotations

import json
import logging
import math
import time
from typing import Any

from ai.model_registry import AIModel, get_model_by_id
from ai.prompts import (
    NO_ANSWER_PHRASE,
    build_chat_prompt,
    build_classification_prompt,
    build_content_generation_prompt,
    build_entity_prompt,
    build_question_answering_prompt,
    build_sentiment_prompt,
    build_summarization_prompt,
)
from ai.providers import Generation, ProviderRegistry
from core.models.task import TaskConfig, TaskKind, TaskResult
from lib.utils import ApplicationError, round_half_up

logger = logging.getLogger(__name__)

# Confidence assigned when the model's JSON could not be parsed
SENTIMENT_FALLBACK_CONFIDENCE = 0.8
CLASSIFICATION_FALLBACK_CONFIDENCE = 0.7
ENTITY_FALLBACK_CONFIDENCE = 0.6

DEFAULT_SUMMARY_LENGTH = 150
DEFAULT_STYLE = "professional"
DEFAULT_CATEGORIES = ["positive", "negative", "neutral"]


# =============================================================================
# Exceptions
# =============================================================================

class ModelNotFoundError(ApplicationError):
    """Raised when a task config names a model the registry doesn't know."""

    def __init__(self, model_id: str):
        super().__init__(
            message=f"Model {model_id} not found",
            code="MODEL_NOT_FOUND",
            suggestion="Pick a model id from GET /api/v1/ai/models",
            details={"model_id": model_id},
        )


class UnsupportedTaskError(ApplicationError):
    """Raised when no handler exists for a task kind."""

    def __init__(self, task: str):
        super().__init__(
            message=f"Unsupported project type: {task}",
            code="UNSUPPORTED_TASK",
            suggestion=f"Use one of: {', '.join(TaskHandler.SUPPORTED_TASKS)}",
            details={"task": task},
        )


class InvalidTaskInputError(ApplicationError):
    """Raised when the input payload lacks a field the task needs."""

    def __init__(self, task: str, field: str):
        super().__init__(
            message=f"Missing required input field '{field}' for {task}",
            code="INVALID_TASK_INPUT",
            suggestion=f"Include '{field}' in the request body",
            details={"task": task, "field": field},
        )


# =============================================================================
# Parsing Helpers
# =============================================================================

def _parse_json_object(raw: str) -> dict[str, Any] | None:
    """Parse trimmed model output as a JSON object, or None."""
    try:
        parsed = json.loads(raw.strip())
    except (json.JSONDecodeError, ValueError):
        return None
    return parsed if isinstance(parsed, dict) else None


def _as_confidence(value: Any) -> float | None:
    """Coerce a model-reported confidence to float, dropping junk."""
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _elapsed_ms(start: float) -> int:
    return max(0, int((time.perf_counter() - start) * 1000))


def _word_count(text: str) -> int:
    return len(text.split())


def fallback_sentiment(raw: str) -> str:
    """Keyword scan used when the sentiment JSON didn't parse."""
    lowered = raw.lower()
    if "positive" in lowered:
        return "positive"
    if "negative" in lowered:
        return "negative"
    return "neutral"


def fallback_category(raw: str, categories: list[str]) -> str | None:
    """First category whose name appears in the output, else the first category."""
    lowered = raw.lower()
    for category in categories:
        if category.lower() in lowered:
            return category
    return categories[0] if categories else None


def compression_ratio(source: str, summary: str) -> int:
    """Percent of the source removed by the summary, rounded half-up."""
    if not source:
        return 0
    return int(round_half_up((1 - len(summary) / len(source)) * 100))


# =============================================================================
# Task Handler
# =============================================================================

class TaskHandler:
    """
    Runs AI tasks against the configured providers.

    Attributes:
        providers: Registry of provider clients, injected at startup
    """

    SUPPORTED_TASKS = (
        TaskKind.SENTIMENT_ANALYSIS.value,
        TaskKind.TEXT_CLASSIFICATION.value,
        TaskKind.NAMED_ENTITY_RECOGNITION.value,
        TaskKind.TEXT_SUMMARIZATION.value,
        TaskKind.QUESTION_ANSWERING.value,
        TaskKind.CHATBOT.value,
        TaskKind.CONTENT_GENERATION.value,
    )

    def __init__(self, providers: ProviderRegistry):
        self.providers = providers

    # -------------------------------------------------------------------------
    # Shared Plumbing
    # -------------------------------------------------------------------------

    def _resolve_model(self, config: TaskConfig) -> AIModel:
        model = get_model_by_id(config.model_id)
        if model is None:
            raise ModelNotFoundError(config.model_id)
        return model

    def _generate(
        self,
        model: AIModel,
        prompt: str,
        config: TaskConfig,
        default_temperature: float,
        default_max_tokens: int,
    ) -> Generation:
        """Send the prompt to the provider that serves `model`."""
        client = self.providers.get(model.provider)
        temperature = default_temperature if config.temperature is None else config.temperature
        max_tokens = config.max_tokens or default_max_tokens

        logger.debug(f"Running {model.id} via {model.provider.value} (temp={temperature}, max_tokens={max_tokens})")
        return client.generate(
            prompt,
            model=client.model_name_for(model.id),
            temperature=temperature,
            max_tokens=max_tokens,
        )

    # -------------------------------------------------------------------------
    # JSON Tasks
    # -------------------------------------------------------------------------

    def execute_sentiment_analysis(self, text: str, config: TaskConfig) -> TaskResult:
        """
        Classify sentiment as positive / negative / neutral.

        Falls back to a keyword scan with confidence 0.8 when the model's
        output isn't a JSON object.
        """
        start = time.perf_counter()
        model = self._resolve_model(config)

        generation = self._generate(model, build_sentiment_prompt(text), config, 0.3, 500)
        processing_time = _elapsed_ms(start)

        parsed = _parse_json_object(generation.text)
        if parsed is not None:
            return TaskResult(
                result={
                    "sentiment": parsed.get("sentiment"),
                    "reasoning": parsed.get("reasoning"),
                },
                confidence=_as_confidence(parsed.get("confidence")),
                processing_time=processing_time,
                model=model.id,
                usage=generation.usage,
            )

        logger.info(f"Sentiment output from {model.id} was not JSON, using keyword fallback")
        return TaskResult(
            result={
                "sentiment": fallback_sentiment(generation.text),
                "reasoning": generation.text.strip(),
            },
            confidence=SENTIMENT_FALLBACK_CONFIDENCE,
            processing_time=processing_time,
            model=model.id,
            usage=generation.usage,
        )

    def execute_text_classification(
        self,
        text: str,
        categories: list[str],
        config: TaskConfig,
    ) -> TaskResult:
        """
        Assign the text to one of `categories`.

        Falls back to the first category named in the output (confidence
        0.7) when the output isn't a JSON object.
        """
        start = time.perf_counter()
        model = self._resolve_model(config)

        generation = self._generate(
            model, build_classification_prompt(text, categories), config, 0.3, 500
        )
        processing_time = _elapsed_ms(start)

        parsed = _parse_json_object(generation.text)
        if parsed is not None:
            return TaskResult(
                result={
                    "category": parsed.get("category"),
                    "reasoning": parsed.get("reasoning"),
                },
                confidence=_as_confidence(parsed.get("confidence")),
                processing_time=processing_time,
                model=model.id,
                usage=generation.usage,
            )

        logger.info(f"Classification output from {model.id} was not JSON, using keyword fallback")
        return TaskResult(
            result={
                "category": fallback_category(generation.text, categories),
                "reasoning": generation.text.strip(),
            },
            confidence=CLASSIFICATION_FALLBACK_CONFIDENCE,
            processing_time=processing_time,
            model=model.id,
            usage=generation.usage,
        )

    def execute_named_entity_recognition(self, text: str, config: TaskConfig) -> TaskResult:
        """Extract entities; unparseable output yields an empty entity list."""
        start = time.perf_counter()
        model = self._resolve_model(config)

        generation = self._generate(model, build_entity_prompt(text), config, 0.3, 1000)
        processing_time = _elapsed_ms(start)

        parsed = _parse_json_object(generation.text)
        if parsed is not None and isinstance(parsed.get("entities"), list):
            entities = [
                {"text": str(e.get("text", "")), "type": str(e.get("type", "OTHER"))}
                for e in parsed["entities"]
                if isinstance(e, dict)
            ]
            return TaskResult(
                result={"entities": entities, "entity_count": len(entities)},
                confidence=_as_confidence(parsed.get("confidence")),
                processing_time=processing_time,
                model=model.id,
                usage=generation.usage,
            )

        return TaskResult(
            result={"entities": [], "entity_count": 0, "raw": generation.text.strip()},
            confidence=ENTITY_FALLBACK_CONFIDENCE,
            processing_time=processing_time,
            model=model.id,
            usage=generation.usage,
        )

    # -------------------------------------------------------------------------
    # Free-Text Tasks
    # -------------------------------------------------------------------------

    def execute_text_summarization(
        self,
        text: str,
        config: TaskConfig,
        max_length: int | None = None,
    ) -> TaskResult:
        """Summarize to roughly `max_length` words and report the compression ratio."""
        start = time.perf_counter()
        model = self._resolve_model(config)

        max_length = max_length or DEFAULT_SUMMARY_LENGTH
        generation = self._generate(
            model,
            build_summarization_prompt(text, max_length),
            config,
            0.5,
            math.ceil(max_length * 1.5),
        )
        processing_time = _elapsed_ms(start)

        summary = generation.text.strip()
        return TaskResult(
            result={
                "summary": summary,
                "original_length": len(text),
                "summary_length": len(summary),
                "compression_ratio": compression_ratio(text, summary),
            },
            processing_time=processing_time,
            model=model.id,
            usage=generation.usage,
        )

    def execute_question_answering(
        self,
        question: str,
        context: str,
        config: TaskConfig,
    ) -> TaskResult:
        """Answer `question` from `context` only."""
        start = time.perf_counter()
        model = self._resolve_model(config)

        generation = self._generate(
            model, build_question_answering_prompt(question, context), config, 0.3, 1000
        )
        processing_time = _elapsed_ms(start)

        answer = generation.text.strip()
        return TaskResult(
            result={
                "answer": answer,
                "question": question,
                "has_answer": NO_ANSWER_PHRASE not in generation.text.lower(),
            },
            processing_time=processing_time,
            model=model.id,
            usage=generation.usage,
        )

    def execute_content_generation(
        self,
        prompt: str,
        config: TaskConfig,
        style: str | None = None,
    ) -> TaskResult:
        start = time.perf_counter()
        model = self._resolve_model(config)

        style = style or DEFAULT_STYLE
        generation = self._generate(
            model, build_content_generation_prompt(prompt, style), config, 0.7, 2000
        )
        processing_time = _elapsed_ms(start)

        content = generation.text.strip()
        return TaskResult(
            result={
                "content": content,
                "word_count": _word_count(content),
                "style": style,
            },
            processing_time=processing_time,
            model=model.id,
            usage=generation.usage,
        )

    def execute_chat(self, message: str, config: TaskConfig) -> TaskResult:
        start = time.perf_counter()
        model = self._resolve_model(config)

        generation = self._generate(model, build_chat_prompt(message), config, 0.7, 2048)
        processing_time = _elapsed_ms(start)

        return TaskResult(
            result={"reply": generation.text.strip()},
            processing_time=processing_time,
            model=model.id,
            usage=generation.usage,
        )

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def dispatch(
        self,
        task: str | TaskKind,
        payload: dict[str, Any],
        config: TaskConfig,
    ) -> TaskResult:
        """
        Run the handler for `task` with a request-body style payload.

        Expected payloads:
            sentiment_analysis / named_entity_recognition: {text}
            text_classification: {text, categories?}
            text_summarization: {text, maxLength?}
            question_answering: {question, context}
            content_generation: {prompt, style?}
            chatbot: {message} (or {text})

        Raises:
            UnsupportedTaskError: No handler for this task kind
            InvalidTaskInputError: A required payload field is missing
            ModelNotFoundError: config.model_id isn't in the registry
            ProviderError: The provider call failed
        """
        task_value = task.value if isinstance(task, TaskKind) else str(task)

        def require(field: str) -> str:
            value = payload.get(field)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise InvalidTaskInputError(task_value, field)
            return str(value)

        if task_value == TaskKind.SENTIMENT_ANALYSIS.value:
            return self.execute_sentiment_analysis(require("text"), config)

        if task_value == TaskKind.TEXT_CLASSIFICATION.value:
            categories = payload.get("categories") or DEFAULT_CATEGORIES
            return self.execute_text_classification(
                require("text"), [str(c) for c in categories], config
            )

        if task_value == TaskKind.NAMED_ENTITY_RECOGNITION.value:
            return self.execute_named_entity_recognition(require("text"), config)

        if task_value == TaskKind.TEXT_SUMMARIZATION.value:
            max_length = payload.get("maxLength", payload.get("max_length"))
            return self.execute_text_summarization(
                require("text"), config, max_length=int(max_length) if max_length else None
            )

        if task_value == TaskKind.QUESTION_ANSWERING.value:
            return self.execute_question_answering(require("question"), require("context"), config)

        if task_value == TaskKind.CONTENT_GENERATION.value:
            return self.execute_content_generation(require("prompt"), config, style=payload.get("style"))

        if task_value == TaskKind.CHATBOT.value:
            message = payload.get("message") or payload.get("text")
            if not message:
                raise InvalidTaskInputError(task_value, "message")
            return self.execute_chat(str(message), config)

        raise UnsupportedTaskError(task_value)
