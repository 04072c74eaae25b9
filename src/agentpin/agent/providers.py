"""Completion providers: one chat call per request, one class per vendor.

Every provider implements the CompletionProvider protocol. The executor
picks one with ``create_provider(config.provider)``, so adding a vendor
means adding a class and a branch in the factory.

Provider errors (auth, rate limits, timeouts) propagate unchanged. Nothing
here retries; retry policy belongs to the caller.

SDK clients are created on first use and resolve their own credentials
(``OPENAI_API_KEY`` / ``ANTHROPIC_API_KEY``) unless an api_key or a
prebuilt client is passed in.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from agentpin.agent.config import settings
from agentpin.agent.models import CompletionResult, ExecutionCost
from agentpin.versioning.errors import AgentPinError
from agentpin.versioning.models import AgentConfig, ModelProvider

if TYPE_CHECKING:
    import anthropic
    import openai

logger = logging.getLogger(__name__)


class ProviderMismatchError(AgentPinError, ValueError):
    """Raised when a provider is handed a config for another vendor."""


class UnsupportedProviderError(AgentPinError, ValueError):
    """Raised by the factory for an unknown provider tag."""


@runtime_checkable
class CompletionProvider(Protocol):
    """Anything that can turn a config plus user input into a completion."""

    async def complete(self, config: AgentConfig, input: str) -> CompletionResult: ...


# =============================================================================
# PRICING (USD per token, approximate)
# =============================================================================

type Rates = tuple[float, float]

OPENAI_PRICING: dict[str, Rates] = {
    "gpt-4": (0.00003, 0.00006),
    "gpt-4-turbo": (0.00001, 0.00003),
    "gpt-3.5-turbo": (0.0000015, 0.000002),
}
OPENAI_FALLBACK_MODEL = "gpt-3.5-turbo"

ANTHROPIC_PRICING: dict[str, Rates] = {
    "claude-3-opus": (0.000015, 0.000075),
    "claude-3-sonnet": (0.000003, 0.000015),
    "claude-3-haiku": (0.00000025, 0.00000125),
}
ANTHROPIC_FALLBACK_MODEL = "claude-3-sonnet"


def estimate_cost(
    pricing: dict[str, Rates],
    fallback_model: str,
    model: str,
    input_tokens: int,
    output_tokens: int,
) -> float:
    """Price a call from a rate table, using the fallback row for unknown models."""
    input_rate, output_rate = pricing.get(model, pricing[fallback_model])
    return input_tokens * input_rate + output_tokens * output_rate


def _require_provider(config: AgentConfig, expected: ModelProvider) -> None:
    if config.provider != expected:
        raise ProviderMismatchError(
            f"{expected} provider cannot run version {config.version} "
            f"(configured for {config.provider})"
        )


# =============================================================================
# PROVIDERS
# =============================================================================


class OpenAIProvider:
    """Chat completions through ``openai.AsyncOpenAI``."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        client: openai.AsyncOpenAI | None = None,
    ) -> None:
        self._api_key = api_key
        self._client = client

    @property
    def client(self) -> openai.AsyncOpenAI:
        if self._client is None:
            import openai

            self._client = openai.AsyncOpenAI(api_key=self._api_key)
        return self._client

    async def complete(self, config: AgentConfig, input: str) -> CompletionResult:
        _require_provider(config, "openai")

        params: dict[str, Any] = {
            "model": config.model,
            "messages": [
                {"role": "system", "content": config.prompt},
                {"role": "user", "content": input},
            ],
            "temperature": config.temperature,
        }
        if config.max_tokens:
            params["max_tokens"] = config.max_tokens
        params.update(config.parameters or {})

        response = await self.client.chat.completions.create(**params)

        text = ""
        if response.choices:
            text = response.choices[0].message.content or ""
        usage = response.usage
        input_tokens = usage.prompt_tokens if usage else 0
        output_tokens = usage.completion_tokens if usage else 0

        return CompletionResult(
            text=text,
            cost=ExecutionCost(
                amount=estimate_cost(
                    OPENAI_PRICING,
                    OPENAI_FALLBACK_MODEL,
                    config.model,
                    input_tokens,
                    output_tokens,
                ),
                input_tokens=input_tokens,
                output_tokens=output_tokens,
                model=config.model,
                provider="openai",
            ),
            raw_response=response,
        )


class AnthropicProvider:
    """Messages API through ``anthropic.AsyncAnthropic``.

    Anthropic requires max_tokens, so configs without one use
    ``settings.anthropic_max_tokens``.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        client: anthropic.AsyncAnthropic | None = None,
        default_max_tokens: int | None = None,
    ) -> None:
        self._api_key = api_key
        self._client = client
        self.default_max_tokens = default_max_tokens or settings.anthropic_max_tokens

    @property
    def client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            import anthropic

            self._client = anthropic.AsyncAnthropic(api_key=self._api_key)
        return self._client

    async def complete(self, config: AgentConfig, input: str) -> CompletionResult:
        _require_provider(config, "anthropic")

        params: dict[str, Any] = {
            "model": config.model,
            "max_tokens": config.max_tokens or self.default_max_tokens,
            "temperature": config.temperature,
            "system": config.prompt,
            "messages": [{"role": "user", "content": input}],
        }
        params.update(config.parameters or {})

        response = await self.client.messages.create(**params)

        text = "\n".join(
            block.text for block in response.content if block.type == "text"
        )
        input_tokens = response.usage.input_tokens
        output_tokens = response.usage.output_tokens

        return CompletionResult(
            text=text,
            cost=ExecutionCost(
                amount=estimate_cost(
                    ANTHROPIC_PRICING,
                    ANTHROPIC_FALLBACK_MODEL,
                    config.model,
                    input_tokens,
                    output_tokens,
                ),
                input_tokens=input_tokens,
                output_tokens=output_tokens,
                model=config.model,
                provider="anthropic",
            ),
            raw_response=response,
        )


def create_provider(provider: str, api_key: str | None = None) -> CompletionProvider:
    """Build the provider for a config's ``provider`` tag.

    Raises:
        UnsupportedProviderError: If the tag is not a known vendor.
    """
    match provider:
        case "openai":
            return OpenAIProvider(api_key)
        case "anthropic":
            return AnthropicProvider(api_key)
        case _:
            raise UnsupportedProviderError(f"Unsupported provider: {provider}")
