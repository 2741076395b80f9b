# =============================================================================
# ai/providers.py - Chat Completion Providers
# =============================================================================
# Both hosted inference services (Cerebras and SambaNova) speak the OpenAI
# chat-completions protocol, so a single ChatCompletionProvider class serves
# both. What differs between them lives in a ProviderSpec:
# - base URL
# - API key
# - default model name
# - how a registry model id is mangled into the provider's model name
#
# Clients are built once at startup by ProviderRegistry.from_settings() and
# injected into the TaskHandler. A missing key fails at construction time,
# not on the first request.
#
# Usage:
#   providers = ProviderRegistry.from_settings(settings)
#   client = providers.get(Provider.CEREBRAS)
#   text = client.generate_text("Say hello", model="llama3.1-8b")
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal

from openai import APIConnectionError, APIStatusError, OpenAI
from openai.types.chat import ChatCompletion
from pydantic import BaseModel, Field

from ai.model_registry import Provider
from core.models.task import TokenUsage
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2048

PROVIDER_LABELS = {
    Provider.CEREBRAS: "Cerebras",
    Provider.SAMBANOVA: "SambaNova",
}

PROVIDER_ENV_VARS = {
    Provider.CEREBRAS: "CEREBRAS_API_KEY",
    Provider.SAMBANOVA: "SAMBANOVA_API_KEY",
}


# =============================================================================
# Exceptions
# =============================================================================

class ProviderConfigError(ApplicationError):
    """Raised when a provider client cannot be built (e.g. missing key)."""

    def __init__(self, provider: Provider, env_var: str):
        super().__init__(
            message=f"{env_var} environment variable is required",
            code="PROVIDER_NOT_CONFIGURED",
            suggestion=f"Set {env_var} in your environment or .env file",
            details={"provider": provider.value},
        )
        self.provider = provider


class ProviderError(ApplicationError):
    """
    Raised when a provider call fails.

    Attributes:
        provider: Which provider failed
        status_code: HTTP status returned by the provider (None if the
            request never got a response)
        status_text: HTTP reason phrase or transport error text
    """

    def __init__(
        self,
        provider: Provider,
        status_code: int | None,
        status_text: str,
    ):
        label = PROVIDER_LABELS.get(provider, provider.value)
        if status_code is None:
            message = f"{label} API error: {status_text}"
        else:
            message = f"{label} API error: {status_code} {status_text}"
        super().__init__(
            message=message,
            code="PROVIDER_ERROR",
            suggestion="Check the provider API key and service status, then retry",
            details={"provider": provider.value, "status_code": status_code},
        )
        self.provider = provider
        self.status_code = status_code
        self.status_text = status_text


# =============================================================================
# Request / Response Types
# =============================================================================

class ChatTurn(BaseModel):
    """One message in a chat request."""
    role: Literal["system", "user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """A chat-completions request."""
    model: str
    messages: list[ChatTurn] = Field(..., min_length=1)
    temperature: float | None = None
    max_tokens: int | None = None
    top_p: float | None = None


class Generation(BaseModel):
    """Text of the first choice plus whatever usage the provider reported."""
    text: str = ""
    usage: TokenUsage | None = None


# =============================================================================
# Provider Specs
# =============================================================================

@dataclass(frozen=True)
class ProviderSpec:
    """
    Everything that distinguishes one hosted provider from the other.

    name_segments: how many trailing dash-separated segments of a registry
        model id form the provider's model name
        ("sambanova-meta-llama-3.1-8b" with 3 -> "llama-3.1-8b").
    """
    provider: Provider
    base_url: str
    api_key: str | None
    default_model: str
    name_segments: int
    env_var: str

    def provider_model_name(self, model_id: str) -> str:
        return "-".join(model_id.split("-")[-self.name_segments:])


def cerebras_spec(api_key: str | None, base_url: str = "https://api.cerebras.ai/v1") -> ProviderSpec:
    return ProviderSpec(
        provider=Provider.CEREBRAS,
        base_url=base_url,
        api_key=api_key,
        default_model="llama3.1-8b",
        # Wire name kept from the catalog ids this app has always sent:
        # "cerebras-llama-3.1-8b" goes out as "3.1-8b", not Cerebras's "llama3.1-8b".
        name_segments=2,
        env_var=PROVIDER_ENV_VARS[Provider.CEREBRAS],
    )


def sambanova_spec(api_key: str | None, base_url: str = "https://api.sambanova.ai/v1") -> ProviderSpec:
    return ProviderSpec(
        provider=Provider.SAMBANOVA,
        base_url=base_url,
        api_key=api_key,
        default_model="Meta-Llama-3.1-8B-Instruct",
        name_segments=3,
        env_var=PROVIDER_ENV_VARS[Provider.SAMBANOVA],
    )


# =============================================================================
# Client
# =============================================================================

class ChatCompletionProvider:
    """
    Thin client for one OpenAI-compatible chat-completions service.

    No retries: the OpenAI SDK's own retry loop is disabled so a failed
    call surfaces immediately as ProviderError.
    """

    def __init__(self, spec: ProviderSpec, client: OpenAI | None = None):
        if not spec.api_key:
            raise ProviderConfigError(spec.provider, spec.env_var)

        self.spec = spec
        self.client = client or OpenAI(
            api_key=spec.api_key,
            base_url=spec.base_url,
            max_retries=0,
        )
        logger.info(f"{PROVIDER_LABELS[spec.provider]} client initialized (base_url={spec.base_url})")

    @property
    def provider(self) -> Provider:
        return self.spec.provider

    def model_name_for(self, model_id: str) -> str:
        """Map a registry model id to this provider's model name."""
        return self.spec.provider_model_name(model_id)

    def chat(self, request: ChatRequest) -> ChatCompletion:
        """
        Send a chat-completions request.

        Returns:
            The parsed completion (choices + usage)

        Raises:
            ProviderError: On a non-2xx status or a transport failure
        """
        params: dict[str, Any] = request.model_dump(exclude_none=True)

        try:
            return self.client.chat.completions.create(**params)
        except APIStatusError as e:
            status_text = e.response.reason_phrase if e.response is not None else str(e)
            logger.warning(
                f"{PROVIDER_LABELS[self.provider]} returned {e.status_code} for model {request.model}"
            )
            raise ProviderError(self.provider, e.status_code, status_text) from e
        except APIConnectionError as e:
            logger.warning(f"{PROVIDER_LABELS[self.provider]} connection failed: {e}")
            raise ProviderError(self.provider, None, str(e)) from e

    def generate(
        self,
        prompt: str,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> Generation:
        """Send a single user turn and return the first choice plus usage."""
        request = ChatRequest(
            model=model or self.spec.default_model,
            messages=[ChatTurn(role="user", content=prompt)],
            temperature=DEFAULT_TEMPERATURE if temperature is None else temperature,
            max_tokens=max_tokens or DEFAULT_MAX_TOKENS,
        )

        response = self.chat(request)

        text = ""
        if response.choices:
            text = response.choices[0].message.content or ""

        usage = None
        if response.usage is not None:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens or 0,
                completion_tokens=response.usage.completion_tokens or 0,
                total_tokens=response.usage.total_tokens or 0,
            )

        logger.debug(f"{PROVIDER_LABELS[self.provider]} response: {text[:200]}...")
        return Generation(text=text, usage=usage)

    def generate_text(
        self,
        prompt: str,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Convenience wrapper: the first choice's text, or "" if absent."""
        return self.generate(prompt, model=model, temperature=temperature, max_tokens=max_tokens).text


# =============================================================================
# Registry
# =============================================================================

class ProviderRegistry:
    """
    The set of provider clients the application serves with.

    Built explicitly at startup and passed to whoever needs a client.
    """

    def __init__(self, clients: dict[Provider, ChatCompletionProvider]):
        self._clients = dict(clients)

    @classmethod
    def from_specs(cls, *specs: ProviderSpec) -> "ProviderRegistry":
        """Build one client per spec; any missing key raises ProviderConfigError."""
        return cls({spec.provider: ChatCompletionProvider(spec) for spec in specs})

    @classmethod
    def from_settings(cls, settings: Any) -> "ProviderRegistry":
        """
        Build both provider clients from application settings.

        Raises:
            ProviderConfigError: If either provider key is missing
        """
        return cls.from_specs(
            cerebras_spec(settings.CEREBRAS_API_KEY, settings.CEREBRAS_BASE_URL),
            sambanova_spec(settings.SAMBANOVA_API_KEY, settings.SAMBANOVA_BASE_URL),
        )

    def get(self, provider: Provider) -> ChatCompletionProvider:
        """
        Client for a provider.

        Raises:
            ProviderConfigError: If the registry was built without that provider
        """
        client = self._clients.get(provider)
        if client is None:
            raise ProviderConfigError(provider, PROVIDER_ENV_VARS[provider])
        return client

    @property
    def providers(self) -> list[Provider]:
        return list(self._clients)
