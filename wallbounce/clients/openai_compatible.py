"""
OpenAI-compatible API client.
Works with OpenAI, Azure OpenAI, Gemini's OpenAI endpoint and other compatible APIs.
"""

import logging
import time
from typing import Any, Optional, Sequence

import httpx
from openai import AsyncAzureOpenAI, AsyncOpenAI

from ..config import ModelConfig
from ..errors import ProviderError, ProviderErrorKind
from .base import Message, ModelOutput, QueryOptions, Role
from .errors import classify_exception
from .pricing import Rates, estimate_cost, get_rates

logger = logging.getLogger(__name__)


class OpenAICompatibleClient:
    def __init__(
        self,
        model: str,
        api_key: str,
        base_url: str,
        model_name: Optional[str] = None,
        provider: str = "openai",
        max_retries: int = 0,
        max_tokens: Optional[int] = None,
        rates: Optional[Rates] = None,
    ):
        self.model = model
        self.model_name = model_name or model
        self.base_url = base_url
        self.provider = provider.lower()
        self.max_tokens = max_tokens
        self.rates = rates or get_rates(model)

        if self.provider == "azure":
            self._client = AsyncAzureOpenAI(
                api_key=api_key,
                azure_endpoint=base_url,
                api_version="2024-05-01-preview",
                max_retries=max_retries,
                http_client=httpx.AsyncClient(timeout=120.0),
            )
        else:
            self._client = AsyncOpenAI(
                api_key=api_key,
                base_url=base_url,
                max_retries=max_retries,
                http_client=httpx.AsyncClient(timeout=120.0),
            )

    def _build_messages(self, prompt: str) -> list[dict[str, Any]]:
        # Prior outputs are already folded into the prompt by the sequencer.
        return [Message(role=Role.USER, content=prompt).to_dict()]

    async def query(
        self,
        prompt: str,
        context: Sequence[str],
        options: QueryOptions,
    ) -> ModelOutput:
        kwargs: dict[str, Any] = {
            "model": self.model_name,
            "messages": self._build_messages(prompt),
            "timeout": options.timeout_seconds,
            "user": options.session_id,
        }

        max_tokens = options.max_tokens or self.max_tokens
        if max_tokens:
            kwargs["max_tokens"] = max_tokens
        if options.temperature is not None:
            kwargs["temperature"] = options.temperature

        start = time.monotonic()
        try:
            response = await self._client.chat.completions.create(**kwargs)
        except Exception as e:
            raise classify_exception(e, self.model) from e
        latency_ms = (time.monotonic() - start) * 1000

        if not getattr(response, "choices", None):
            raise ProviderError(ProviderErrorKind.MALFORMED_RESPONSE, "response has no choices", model=self.model)

        content = response.choices[0].message.content
        if not content or not content.strip():
            raise ProviderError(ProviderErrorKind.MALFORMED_RESPONSE, "response content is empty", model=self.model)

        prompt_tokens = 0
        completion_tokens = 0
        usage = getattr(response, "usage", None)
        if usage is not None:
            prompt_tokens = usage.prompt_tokens or 0
            completion_tokens = usage.completion_tokens or 0

        logger.debug(
            "%s answered in %.0fms (%d prompt / %d completion tokens)",
            self.model, latency_ms, prompt_tokens, completion_tokens,
        )

        return ModelOutput(
            text=content,
            tokens_used=prompt_tokens + completion_tokens,
            cost_estimate=estimate_cost(self.rates, prompt_tokens, completion_tokens),
            latency_ms=latency_ms,
        )

    async def aclose(self) -> None:
        await self._client.close()


def create_client(model_config: ModelConfig) -> OpenAICompatibleClient:
    api_key = model_config.resolved_api_key()
    if not api_key or not model_config.base_url:
        raise ValueError(f"Model '{model_config.identifier}' has no credentials configured")

    return OpenAICompatibleClient(
        model=model_config.identifier,
        api_key=api_key,
        base_url=model_config.base_url,
        model_name=model_config.model_name,
        provider=model_config.provider,
        max_retries=model_config.max_retries,
        max_tokens=model_config.max_tokens,
        rates=get_rates(model_config.identifier, model_config.input_per_1k, model_config.output_per_1k),
    )
