"""Ollama LLM provider implementation."""

import logging
from typing import Any

import httpx
from pydantic import BaseModel

from deskquery.errors import ModelError, ModelErrorKind
from deskquery.llm.base import LLMProvider, ResponseResult

logger = logging.getLogger(__name__)


class OllamaConfig(BaseModel):
    """Configuration for Ollama provider."""

    host: str = "http://localhost:11434"
    model: str = "llama3.2"
    max_tokens: int = 1000
    temperature: float = 0.7
    timeout: int = 120


class OllamaProvider(LLMProvider):
    """Ollama LLM provider implementation."""

    def __init__(self, config: OllamaConfig | None = None, **kwargs: Any) -> None:
        """Initialize Ollama provider.

        Args:
            config: Ollama configuration
            **kwargs: Additional configuration options
        """
        self.config = config or OllamaConfig(**kwargs)
        self.client = httpx.AsyncClient(
            base_url=self.config.host,
            timeout=self.config.timeout,
        )

    async def generate_response(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> ResponseResult:
        """Generate response using Ollama's generate endpoint."""
        payload: dict[str, Any] = {
            "model": self.config.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": self.config.temperature if temperature is None else temperature,
                "num_predict": max_tokens or self.config.max_tokens,
            },
        }
        if system_prompt:
            payload["system"] = system_prompt

        logger.debug(f"Sending request to Ollama with model: {self.config.model}")
        logger.debug(f"Prompt length: {len(prompt)} characters")

        try:
            response = await self.client.post("/api/generate", json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            logger.error(f"Ollama request timed out: {e}")
            raise ModelError(f"Ollama request timed out: {e}", ModelErrorKind.TIMEOUT) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"Ollama response HTTP error: {status} {e.response.text}")
            kind = ModelErrorKind.RATE_LIMITED if status == 429 else ModelErrorKind.UNAVAILABLE
            raise ModelError(f"Ollama API error: {status}", kind) from e
        except httpx.RequestError as e:
            logger.error(f"Ollama request failed: {e} (host: {self.config.host})")
            raise ModelError(f"Failed to reach Ollama: {e}") from e
        except ValueError as e:
            raise ModelError(
                f"Ollama returned a non-JSON body: {e}", ModelErrorKind.INVALID_RESPONSE
            ) from e

        if "response" not in data:
            raise ModelError("Ollama response missing 'response' field", ModelErrorKind.INVALID_RESPONSE)

        return ResponseResult(
            content=data["response"],
            model=self.config.model,
            token_count=data.get("eval_count"),
            finish_reason=data.get("done_reason"),
        )

    async def health_check(self) -> bool:
        """Check if Ollama service is healthy."""
        try:
            response = await self.client.get("/api/tags")
            return response.status_code == 200
        except Exception as e:
            logger.warning(f"Ollama health check failed: {e}")
            return False

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.client.aclose()
