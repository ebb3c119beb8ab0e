"""Google Gemini LLM provider implementation."""

import logging
from typing import Any

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from pydantic import BaseModel

from deskquery.errors import ModelError, ModelErrorKind
from deskquery.llm.base import LLMProvider, ResponseResult

logger = logging.getLogger(__name__)


class GeminiConfig(BaseModel):
    """Configuration for Gemini provider."""

    api_key: str
    model: str = "gemini-1.5-flash"
    max_tokens: int = 1000
    temperature: float = 0.7
    timeout: int = 30


def _error_kind(error: Exception) -> ModelErrorKind:
    # response.text raises ValueError when the candidate was blocked
    if isinstance(error, ValueError):
        return ModelErrorKind.INVALID_RESPONSE
    if isinstance(error, google_exceptions.DeadlineExceeded):
        return ModelErrorKind.TIMEOUT
    if isinstance(error, google_exceptions.ResourceExhausted):
        return ModelErrorKind.RATE_LIMITED
    if isinstance(error, (google_exceptions.Unauthenticated, google_exceptions.PermissionDenied)):
        return ModelErrorKind.AUTH
    return ModelErrorKind.UNAVAILABLE


class GeminiProvider(LLMProvider):
    """Google Gemini LLM provider implementation."""

    def __init__(self, config: GeminiConfig | None = None, **kwargs: Any) -> None:
        """Initialize Gemini provider.

        Args:
            config: Gemini configuration
            **kwargs: Additional configuration options
        """
        self.config = config or GeminiConfig(**kwargs)
        genai.configure(api_key=self.config.api_key)

    def _model(self, system_prompt: str | None) -> genai.GenerativeModel:
        # System instructions are bound to the model object in this SDK
        return genai.GenerativeModel(self.config.model, system_instruction=system_prompt)

    async def generate_response(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> ResponseResult:
        """Generate response using Gemini's chat model."""
        model = self._model(system_prompt)

        try:
            response = await model.generate_content_async(
                prompt,
                generation_config=genai.types.GenerationConfig(
                    max_output_tokens=max_tokens or self.config.max_tokens,
                    temperature=self.config.temperature if temperature is None else temperature,
                ),
                request_options={"timeout": self.config.timeout},
            )
            text = response.text
        except (google_exceptions.GoogleAPIError, ValueError) as e:
            logger.error(f"Gemini response request failed: {e}")
            raise ModelError(f"Gemini request failed: {e}", _error_kind(e)) from e

        return ResponseResult(
            content=text,
            model=self.config.model,
            token_count=response.usage_metadata.total_token_count
            if response.usage_metadata
            else None,
            finish_reason=response.candidates[0].finish_reason.name
            if response.candidates
            else None,
        )

    async def health_check(self) -> bool:
        """Check if Gemini service is accessible."""
        try:
            genai.get_model(f"models/{self.config.model}")
            return True
        except Exception as e:
            logger.warning(f"Gemini health check failed: {e}")
            return False
