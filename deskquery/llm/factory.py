"""Factory for creating LLM providers from configuration."""

from deskquery.config import LLMProvider as LLMProviderEnum
from deskquery.config import Settings, get_settings
from deskquery.llm.base import LLMProvider, LLMProviderFactory


def create_llm_provider(provider_name: str | None = None, settings: Settings | None = None) -> LLMProvider:
    """Create LLM provider from configuration.

    Args:
        provider_name: Override provider name, defaults to settings.llm_provider
        settings: Settings to read credentials from, defaults to the global settings

    Returns:
        Configured LLM provider instance

    Raises:
        ValueError: If provider configuration is invalid
    """
    settings = settings or get_settings()
    provider_name = provider_name or settings.llm_provider

    # Build provider-specific config
    if provider_name == LLMProviderEnum.OLLAMA:
        from deskquery.llm.ollama import OllamaConfig

        config = OllamaConfig(
            host=settings.ollama_host,
            model=settings.ollama_model,
        )
        return LLMProviderFactory.create("ollama", config=config)

    elif provider_name == LLMProviderEnum.OPENAI:
        from deskquery.llm.openai import OpenAIConfig

        if not settings.openai_api_key:
            raise ValueError("OpenAI API key is required")

        config = OpenAIConfig(api_key=settings.openai_api_key, model=settings.openai_model)
        return LLMProviderFactory.create("openai", config=config)

    elif provider_name == LLMProviderEnum.GEMINI:
        from deskquery.llm.gemini import GeminiConfig

        if not settings.gemini_api_key:
            raise ValueError("Gemini API key is required")

        config = GeminiConfig(api_key=settings.gemini_api_key, model=settings.gemini_model)
        return LLMProviderFactory.create("gemini", config=config)

    elif provider_name == LLMProviderEnum.ANTHROPIC:
        from deskquery.llm.anthropic import AnthropicConfig

        if not settings.anthropic_api_key:
            raise ValueError("Anthropic API key is required")

        config = AnthropicConfig(api_key=settings.anthropic_api_key, model=settings.anthropic_model)
        return LLMProviderFactory.create("anthropic", config=config)

    else:
        raise ValueError(f"Unknown LLM provider: {provider_name}")
