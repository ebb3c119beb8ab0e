"""LLM providers module."""

from deskquery.llm.anthropic import AnthropicConfig, AnthropicProvider
from deskquery.llm.base import LLMProvider, LLMProviderFactory, ResponseResult
from deskquery.llm.factory import create_llm_provider
from deskquery.llm.gemini import GeminiConfig, GeminiProvider
from deskquery.llm.ollama import OllamaConfig, OllamaProvider
from deskquery.llm.openai import OpenAIConfig, OpenAIProvider

# Register all providers
LLMProviderFactory.register("ollama", OllamaProvider)
LLMProviderFactory.register("openai", OpenAIProvider)
LLMProviderFactory.register("gemini", GeminiProvider)
LLMProviderFactory.register("anthropic", AnthropicProvider)

__all__ = [
    "AnthropicConfig",
    "AnthropicProvider",
    "GeminiConfig",
    "GeminiProvider",
    "LLMProvider",
    "LLMProviderFactory",
    "OllamaConfig",
    "OllamaProvider",
    "OpenAIConfig",
    "OpenAIProvider",
    "ResponseResult",
    "create_llm_provider",
]
