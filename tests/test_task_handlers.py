# =============================================================================
# tests/test_task_handlers.py - Task Dispatcher Tests
# =============================================================================
# Provider clients are mocked (see conftest.provider_clients); these tests
# cover prompt routing, output parsing and the keyword fallbacks.
#
# Run with: pytest tests/test_task_handlers.py -v
# =============================================================================

import pytest

from ai.model_registry import Provider
from ai.providers import ProviderError
from ai.task_handlers import (
    InvalidTaskInputError,
    ModelNotFoundError,
    UnsupportedTaskError,
    compression_ratio,
    fallback_category,
    fallback_sentiment,
)
from core.models.task import TaskConfig, TaskKind
from tests.conftest import make_generation


CEREBRAS_8B = TaskConfig(model_id="cerebras-llama-3.1-8b")
SAMBANOVA_70B = TaskConfig(model_id="sambanova-meta-llama-3.1-70b")


def _reply(provider_clients, text, provider=Provider.CEREBRAS, total_tokens=42):
    provider_clients[provider].generate.return_value = make_generation(text, total_tokens)


# =============================================================================
# Helpers
# =============================================================================

class TestHelpers:
    def test_fallback_sentiment_order(self):
        # "positive" is checked before "negative"
        assert fallback_sentiment("Not positive, quite negative") == "positive"
        assert fallback_sentiment("Negative overall") == "negative"
        assert fallback_sentiment("hard to say") == "neutral"

    def test_fallback_category_first_match(self):
        assert fallback_category("looks like ham to me", ["spam", "ham"]) == "ham"

    def test_fallback_category_defaults_to_first(self):
        assert fallback_category("unclear", ["spam", "ham"]) == "spam"

    def test_fallback_category_no_categories(self):
        assert fallback_category("anything", []) is None

    def test_compression_ratio(self):
        assert compression_ratio("x" * 100, "x" * 20) == 80

    def test_compression_ratio_empty_source(self):
        assert compression_ratio("", "summary") == 0


# =============================================================================
# Sentiment
# =============================================================================

class TestSentiment:
    def test_parses_json_output(self, task_handler, provider_clients):
        """Well-formed JSON is used as-is."""
        _reply(provider_clients, '{"sentiment": "positive", "confidence": 0.9, "reasoning": "upbeat"}')

        result = task_handler.execute_sentiment_analysis("I love this!", CEREBRAS_8B)

        assert result.result == {"sentiment": "positive", "reasoning": "upbeat"}
        assert result.confidence == 0.9
        assert result.model == "cerebras-llama-3.1-8b"
        assert result.processing_time >= 0
        assert result.usage.total_tokens == 42

    def test_malformed_output_uses_keyword_fallback(self, task_handler, provider_clients):
        _reply(provider_clients, "The tone is clearly negative.")

        result = task_handler.execute_sentiment_analysis("Terrible", CEREBRAS_8B)

        assert result.result["sentiment"] == "negative"
        assert result.result["reasoning"] == "The tone is clearly negative."
        assert result.confidence == 0.8

    def test_json_array_is_not_an_object(self, task_handler, provider_clients):
        _reply(provider_clients, '["positive"]')

        result = task_handler.execute_sentiment_analysis("Nice", CEREBRAS_8B)

        assert result.confidence == 0.8
        assert result.result["sentiment"] == "positive"

    def test_call_parameters(self, task_handler, provider_clients):
        """Defaults are 0.3 temperature and 500 tokens, and the prompt embeds the input."""
        _reply(provider_clients, "{}")

        task_handler.execute_sentiment_analysis("Great product", CEREBRAS_8B)

        call = provider_clients[Provider.CEREBRAS].generate.call_args
        assert '"Great product"' in call.args[0]
        assert call.kwargs["temperature"] == 0.3
        assert call.kwargs["max_tokens"] == 500
        assert call.kwargs["model"] == "3.1-8b"

    def test_config_overrides_defaults(self, task_handler, provider_clients):
        _reply(provider_clients, "{}")
        config = TaskConfig(model_id="cerebras-llama-3.1-8b", temperature=0.0, max_tokens=64)

        task_handler.execute_sentiment_analysis("ok", config)

        call = provider_clients[Provider.CEREBRAS].generate.call_args
        assert call.kwargs["temperature"] == 0.0
        assert call.kwargs["max_tokens"] == 64

    def test_routes_to_model_provider(self, task_handler, provider_clients):
        _reply(provider_clients, "{}", provider=Provider.SAMBANOVA)

        task_handler.execute_sentiment_analysis("ok", SAMBANOVA_70B)

        provider_clients[Provider.SAMBANOVA].generate.assert_called_once()
        provider_clients[Provider.CEREBRAS].generate.assert_not_called()
        assert provider_clients[Provider.SAMBANOVA].generate.call_args.kwargs["model"] == "llama-3.1-70b"

    def test_unknown_model(self, task_handler):
        with pytest.raises(ModelNotFoundError) as exc_info:
            task_handler.execute_sentiment_analysis("ok", TaskConfig(model_id="gpt-4"))
        assert str(exc_info.value) == "Model gpt-4 not found"

    def test_provider_error_propagates(self, task_handler, provider_clients):
        provider_clients[Provider.CEREBRAS].generate.side_effect = ProviderError(
            Provider.CEREBRAS, 503, "Service Unavailable"
        )

        with pytest.raises(ProviderError):
            task_handler.execute_sentiment_analysis("ok", CEREBRAS_8B)


# =============================================================================
# Classification and Entities
# =============================================================================

class TestClassification:
    def test_parses_json_output(self, task_handler, provider_clients):
        _reply(provider_clients, '{"category": "spam", "confidence": 0.95, "reasoning": "links"}')

        result = task_handler.execute_text_classification("Buy now!", ["spam", "ham"], CEREBRAS_8B)

        assert result.result["category"] == "spam"
        assert result.confidence == 0.95

    def test_fallback_matches_category_name(self, task_handler, provider_clients):
        _reply(provider_clients, "looks like ham to me")

        result = task_handler.execute_text_classification("Lunch at noon?", ["spam", "ham"], CEREBRAS_8B)

        assert result.result["category"] == "ham"
        assert result.confidence == 0.7

    def test_prompt_lists_categories(self, task_handler, provider_clients):
        _reply(provider_clients, "{}")

        task_handler.execute_text_classification("x", ["billing", "support"], CEREBRAS_8B)

        prompt = provider_clients[Provider.CEREBRAS].generate.call_args.args[0]
        assert "billing, support" in prompt


class TestEntities:
    def test_parses_entities(self, task_handler, provider_clients):
        _reply(
            provider_clients,
            '{"entities": [{"text": "Ada", "type": "PERSON"}, {"text": "London"}], "confidence": 0.85}',
        )

        result = task_handler.execute_named_entity_recognition("Ada lived in London", CEREBRAS_8B)

        assert result.result["entity_count"] == 2
        assert result.result["entities"][1] == {"text": "London", "type": "OTHER"}
        assert result.confidence == 0.85

    def test_unparseable_output(self, task_handler, provider_clients):
        _reply(provider_clients, "Ada (person)")

        result = task_handler.execute_named_entity_recognition("Ada", CEREBRAS_8B)

        assert result.result["entities"] == []
        assert result.confidence == 0.6


# =============================================================================
# Free-Text Tasks
# =============================================================================

class TestSummarization:
    def test_metrics(self, task_handler, provider_clients):
        source = "a" * 100
        _reply(provider_clients, "  " + "b" * 20 + "\n")

        result = task_handler.execute_text_summarization(source, CEREBRAS_8B)

        assert result.result["summary"] == "b" * 20
        assert result.result["original_length"] == 100
        assert result.result["summary_length"] == 20
        assert result.result["compression_ratio"] == 80
        assert result.confidence is None

    def test_max_tokens_derived_from_length(self, task_handler, provider_clients):
        _reply(provider_clients, "short")

        task_handler.execute_text_summarization("long text", CEREBRAS_8B, max_length=101)

        call = provider_clients[Provider.CEREBRAS].generate.call_args
        assert call.kwargs["max_tokens"] == 152
        assert call.kwargs["temperature"] == 0.5
        assert "approximately 101 words" in call.args[0]


class TestQuestionAnswering:
    def test_answer_found(self, task_handler, provider_clients):
        _reply(provider_clients, "Paris.", provider=Provider.SAMBANOVA)

        result = task_handler.execute_question_answering(
            "Capital of France?", "France's capital is Paris.", SAMBANOVA_70B
        )

        assert result.result == {"answer": "Paris.", "question": "Capital of France?", "has_answer": True}

    def test_no_answer_phrase(self, task_handler, provider_clients):
        _reply(provider_clients, "I Cannot find the answer in the provided context.", provider=Provider.SAMBANOVA)

        result = task_handler.execute_question_answering("Who?", "Nothing here.", SAMBANOVA_70B)

        assert result.result["has_answer"] is False


class TestContentGeneration:
    def test_word_count_and_default_style(self, task_handler, provider_clients):
        _reply(provider_clients, "Three little words")

        result = task_handler.execute_content_generation("Write a slogan", CEREBRAS_8B)

        assert result.result == {"content": "Three little words", "word_count": 3, "style": "professional"}
        assert provider_clients[Provider.CEREBRAS].generate.call_args.kwargs["max_tokens"] == 2000


# =============================================================================
# Dispatch
# =============================================================================

class TestDispatch:
    def test_dispatch_by_enum(self, task_handler, provider_clients):
        _reply(provider_clients, '{"sentiment": "neutral", "confidence": 0.5}')

        result = task_handler.dispatch(TaskKind.SENTIMENT_ANALYSIS, {"text": "meh"}, CEREBRAS_8B)

        assert result.result["sentiment"] == "neutral"

    def test_classification_default_categories(self, task_handler, provider_clients):
        _reply(provider_clients, "neutral I think")

        result = task_handler.dispatch("text_classification", {"text": "ok"}, CEREBRAS_8B)

        assert result.result["category"] == "neutral"

    def test_summarization_reads_camel_case_length(self, task_handler, provider_clients):
        _reply(provider_clients, "s")

        task_handler.dispatch("text_summarization", {"text": "t", "maxLength": 10}, CEREBRAS_8B)

        assert provider_clients[Provider.CEREBRAS].generate.call_args.kwargs["max_tokens"] == 15

    def test_chatbot_accepts_text(self, task_handler, provider_clients):
        _reply(provider_clients, "Hello there", provider=Provider.SAMBANOVA)

        result = task_handler.dispatch("chatbot", {"text": "Hi"}, SAMBANOVA_70B)

        assert result.result == {"reply": "Hello there"}

    def test_missing_field(self, task_handler):
        with pytest.raises(InvalidTaskInputError) as exc_info:
            task_handler.dispatch("question_answering", {"question": "Why?"}, CEREBRAS_8B)
        assert exc_info.value.details["field"] == "context"

    def test_blank_field_is_missing(self, task_handler):
        with pytest.raises(InvalidTaskInputError):
            task_handler.dispatch("sentiment_analysis", {"text": "   "}, CEREBRAS_8B)

    @pytest.mark.parametrize("task", ["custom", "translation"])
    def test_unsupported_task(self, task_handler, task):
        with pytest.raises(UnsupportedTaskError) as exc_info:
            task_handler.dispatch(task, {"text": "x"}, CEREBRAS_8B)
        assert str(exc_info.value) == f"Unsupported project type: {task}"
