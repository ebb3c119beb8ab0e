"""OpenAI LLM provider implementation."""

import logging
from typing import Any

import openai
from pydantic import BaseModel

from deskquery.errors import ModelError, ModelErrorKind
from deskquery.llm.base import LLMProvider, ResponseResult

logger = logging.getLogger(__name__)


class OpenAIConfig(BaseModel):
    """Configuration for OpenAI provider."""

    api_key: str
    model: str = "gpt-4o-mini"
    max_tokens: int = 1000
    temperature: float = 0.7
    timeout: int = 30
    max_retries: int = 2


def _error_kind(error: openai.OpenAIError) -> ModelErrorKind:
    if isinstance(error, openai.APITimeoutError):
        return ModelErrorKind.TIMEOUT
    if isinstance(error, openai.RateLimitError):
        return ModelErrorKind.RATE_LIMITED
    if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return ModelErrorKind.AUTH
    return ModelErrorKind.UNAVAILABLE


class OpenAIProvider(LLMProvider):
    """OpenAI LLM provider implementation."""

    def __init__(self, config: OpenAIConfig | None = None, **kwargs: Any) -> None:
        """Initialize OpenAI provider.

        Args:
            config: OpenAI configuration
            **kwargs: Additional configuration options
        """
        self.config = config or OpenAIConfig(**kwargs)
        self.client = openai.AsyncOpenAI(
            api_key=self.config.api_key,
            timeout=self.config.timeout,
            max_retries=self.config.max_retries,
        )

    async def generate_response(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> ResponseResult:
        """Generate response using OpenAI's chat model."""
        messages = []

        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})

        messages.append({"role": "user", "content": prompt})

        try:
            response = await self.client.chat.completions.create(
                model=self.config.model,
                messages=messages,
                max_tokens=max_tokens or self.config.max_tokens,
                temperature=self.config.temperature if temperature is None else temperature,
            )
        except openai.OpenAIError as e:
            logger.error(f"OpenAI response request failed: {e}")
            raise ModelError(f"OpenAI request failed: {e}", _error_kind(e)) from e

        choice = response.choices[0]

        return ResponseResult(
            content=choice.message.content or "",
            model=self.config.model,
            token_count=response.usage.total_tokens if response.usage else None,
            finish_reason=choice.finish_reason,
        )

    async def health_check(self) -> bool:
        """Check if OpenAI service is accessible."""
        try:
            await self.client.models.retrieve(self.config.model)
            return True
        except Exception as e:
            logger.warning(f"OpenAI health check failed: {e}")
            return False
