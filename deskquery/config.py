"""Configuration management using pydantic-settings."""

from enum import Enum
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMProvider(str, Enum):
    """Supported LLM providers."""

    OLLAMA = "ollama"
    OPENAI = "openai"
    GEMINI = "gemini"
    ANTHROPIC = "anthropic"


class Environment(str, Enum):
    """Application environments."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # LLM Provider Configuration
    llm_provider: LLMProvider = Field(
        default=LLMProvider.OPENAI,
        description="LLM provider used for query interpretation and answers",
    )

    # Ollama Configuration
    ollama_host: str = Field(
        default="http://localhost:11434",
        description="Ollama API host URL",
    )
    ollama_model: str = Field(
        default="llama3.2",
        description="Ollama model to use",
    )

    # OpenAI Configuration
    openai_api_key: str | None = Field(
        default=None,
        description="OpenAI API key",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI chat model to use",
    )

    # Google Gemini Configuration
    gemini_api_key: str | None = Field(
        default=None,
        description="Google Gemini API key",
    )
    gemini_model: str = Field(
        default="gemini-1.5-flash",
        description="Google Gemini model to use",
    )

    # Anthropic Configuration
    anthropic_api_key: str | None = Field(
        default=None,
        description="Anthropic API key",
    )
    anthropic_model: str = Field(
        default="claude-3-5-haiku-20241022",
        description="Anthropic model to use",
    )

    # AI path tuning
    interpret_temperature: float = Field(
        default=0.3,
        description="Sampling temperature for structured query interpretation",
    )
    interpret_max_tokens: int = Field(
        default=500,
        description="Token budget for structured query interpretation",
    )
    answer_temperature: float = Field(
        default=0.7,
        description="Sampling temperature for grounded answers",
    )
    answer_max_tokens: int = Field(
        default=1500,
        description="Token budget for grounded answers",
    )

    # Caching
    interpretation_cache_max_size: int | None = Field(
        default=None,
        description="Maximum interpretation cache entries (unbounded when unset)",
    )
    context_preview_chars: int = Field(
        default=150,
        description="Characters of body preview included per item in the AI context",
    )
    snapshot_reload_seconds: float = Field(
        default=60.0,
        description="How long an in-memory snapshot is trusted before re-reading storage",
    )

    # Storage Configuration
    cache_dir: Path = Field(
        default=Path(".deskquery-cache"),
        description="Directory for the local filesystem storage tier",
    )
    store_key: str = Field(
        default="ticket-snapshot",
        description="Key under which the snapshot blob is stored",
    )
    vercel: str | None = Field(
        default=None,
        description="Set by Vercel when running in a deployment",
    )
    vercel_env: str | None = Field(
        default=None,
        description="Vercel deployment environment (production, preview)",
    )
    edge_config_id: str | None = Field(
        default=None,
        description="Vercel Edge Config store ID",
    )
    edge_config_token: str | None = Field(
        default=None,
        description="Edge Config read access token",
    )
    vercel_token: str | None = Field(
        default=None,
        description="Vercel API token used to write Edge Config items",
    )

    # Snapshot source
    snapshot_source_path: Path | None = Field(
        default=None,
        description="JSON export of tickets/conversations used by refresh",
    )

    # Application Configuration
    max_query_length: int = Field(
        default=500,
        description="Longest accepted query",
    )
    port: int = Field(
        default=3000,
        description="HTTP server port",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )

    @property
    def is_deployed(self) -> bool:
        """Whether the process runs inside a Vercel deployment."""
        return bool(self.vercel or self.vercel_env)

    @property
    def remote_store_configured(self) -> bool:
        """Whether Edge Config credentials are available."""
        return bool(self.edge_config_id and (self.edge_config_token or self.vercel_token))

    @property
    def snapshot_file(self) -> Path:
        """Path of the filesystem tier's snapshot file."""
        return self.cache_dir / f"{self.store_key}.json"

    def validate_provider_config(self) -> None:
        """Validate that required API keys are set for the selected provider."""
        if self.llm_provider == LLMProvider.OPENAI and not self.openai_api_key:
            raise ValueError("OpenAI API key is required when using OpenAI provider")
        elif self.llm_provider == LLMProvider.GEMINI and not self.gemini_api_key:
            raise ValueError("Gemini API key is required when using Gemini provider")
        elif self.llm_provider == LLMProvider.ANTHROPIC and not self.anthropic_api_key:
            raise ValueError("Anthropic API key is required when using Anthropic provider")


# Global settings instance - lazy loaded
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
