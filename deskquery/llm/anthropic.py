"""Anthropic Claude LLM provider implementation."""

import logging
from typing import Any

import anthropic
from pydantic import BaseModel

from deskquery.errors import ModelError, ModelErrorKind
from deskquery.llm.base import LLMProvider, ResponseResult

logger = logging.getLogger(__name__)


class AnthropicConfig(BaseModel):
    """Configuration for Anthropic provider."""

    api_key: str
    model: str = "claude-3-5-haiku-20241022"
    max_tokens: int = 1000
    temperature: float = 0.7
    timeout: int = 30


def _error_kind(error: anthropic.AnthropicError) -> ModelErrorKind:
    if isinstance(error, anthropic.APITimeoutError):
        return ModelErrorKind.TIMEOUT
    if isinstance(error, anthropic.RateLimitError):
        return ModelErrorKind.RATE_LIMITED
    if isinstance(error, (anthropic.AuthenticationError, anthropic.PermissionDeniedError)):
        return ModelErrorKind.AUTH
    return ModelErrorKind.UNAVAILABLE


class AnthropicProvider(LLMProvider):
    """Anthropic Claude LLM provider implementation."""

    def __init__(self, config: AnthropicConfig | None = None, **kwargs: Any) -> None:
        """Initialize Anthropic provider.

        Args:
            config: Anthropic configuration
            **kwargs: Additional configuration options
        """
        self.config = config or AnthropicConfig(**kwargs)
        self.client = anthropic.AsyncAnthropic(
            api_key=self.config.api_key,
            timeout=self.config.timeout,
        )

    async def generate_response(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> ResponseResult:
        """Generate response using Anthropic's Claude model."""
        request: dict[str, Any] = {
            "model": self.config.model,
            "max_tokens": max_tokens or self.config.max_tokens,
            "temperature": self.config.temperature if temperature is None else temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_prompt:
            request["system"] = system_prompt

        try:
            response = await self.client.messages.create(**request)
        except anthropic.AnthropicError as e:
            logger.error(f"Anthropic response request failed: {e}")
            raise ModelError(f"Anthropic request failed: {e}", _error_kind(e)) from e

        # Anthropic returns content as a list of blocks
        content = ""
        for block in response.content:
            if block.type == "text":
                content += block.text

        return ResponseResult(
            content=content,
            model=self.config.model,
            token_count=response.usage.output_tokens + response.usage.input_tokens,
            finish_reason=response.stop_reason,
        )

    async def health_check(self) -> bool:
        """Check if Anthropic service is accessible."""
        try:
            await self.client.messages.create(
                model=self.config.model,
                max_tokens=10,
                messages=[{"role": "user", "content": "Hi"}],
            )
            return True
        except Exception as e:
            logger.warning(f"Anthropic health check failed: {e}")
            return False
