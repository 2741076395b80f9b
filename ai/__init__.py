# =============================================================================
# ai/ - Model Catalog, Providers and Task Dispatch
# =============================================================================
# - model_registry.py: Static catalog of hosted models and recommendation
# - providers.py: OpenAI-compatible chat-completion clients + registry
# - prompts.py: Prompt templates per task kind
# - task_handlers.py: TaskHandler, one operation per task kind
#
# Provider clients are built once at startup (see app/main.py lifespan)
# and handed to TaskHandler; nothing here holds global client state.
# =============================================================================

from ai.model_registry import (
    AVAILABLE_MODELS,
    AIModel,
    Provider,
    get_model_by_id,
    get_models_by_task,
    get_recommended_model,
)
from ai.providers import (
    ChatCompletionProvider,
    Generation,
    ProviderConfigError,
    ProviderError,
    ProviderRegistry,
    ProviderSpec,
    cerebras_spec,
    sambanova_spec,
)
from ai.task_handlers import (
    InvalidTaskInputError,
    ModelNotFoundError,
    TaskHandler,
    UnsupportedTaskError,
)

__all__ = [
    # Registry
    "AVAILABLE_MODELS",
    "AIModel",
    "Provider",
    "get_model_by_id",
    "get_models_by_task",
    "get_recommended_model",
    # Providers
    "ChatCompletionProvider",
    "Generation",
    "ProviderConfigError",
    "ProviderError",
    "ProviderRegistry",
    "ProviderSpec",
    "cerebras_spec",
    "sambanova_spec",
    # Tasks
    "InvalidTaskInputError",
    "ModelNotFoundError",
    "TaskHandler",
    "UnsupportedTaskError",
]
