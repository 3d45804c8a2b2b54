"""
Settings Management with Pydantic

Provides type-safe configuration management with:
- Environment variable support
- Validation
- Storage backend and LLM provider configurations
"""

from enum import Enum
from typing import Optional
from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMProviderType(str, Enum):
    """Supported LLM providers."""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    AZURE_OPENAI = "azure_openai"


class StorageBackendType(str, Enum):
    """Supported account storage backends."""
    KEY_VALUE = "key_value"
    RELATIONAL = "relational"


class LLMConfig(BaseSettings):
    """LLM provider configuration for transcript analysis."""
    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        extra="ignore"
    )

    provider: LLMProviderType = LLMProviderType.ANTHROPIC
    model_name: str = "claude-3-5-sonnet-20241022"
    temperature: float = 0.0
    max_tokens: int = 4096
    timeout: int = 60

    # API Keys (loaded from environment)
    openai_api_key: Optional[SecretStr] = Field(default=None, alias="OPENAI_API_KEY")
    anthropic_api_key: Optional[SecretStr] = Field(default=None, alias="ANTHROPIC_API_KEY")

    # Azure OpenAI settings
    azure_endpoint: Optional[str] = None
    azure_api_version: str = "2024-02-15-preview"
    azure_deployment_name: Optional[str] = None


class StorageConfig(BaseSettings):
    """Account storage configuration."""
    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        extra="ignore"
    )

    backend: StorageBackendType = StorageBackendType.KEY_VALUE

    # Key-value settings (in-memory when no Redis URL is set)
    redis_url: Optional[str] = None
    key_prefix: str = "accounts"

    # Relational settings
    database_url: str = "sqlite:///./data/accounts.db"
    echo_sql: bool = False


class Settings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Application
    app_name: str = "Account Intel"
    debug: bool = False
    log_level: str = "INFO"

    # Sub-configurations
    llm: LLMConfig = Field(default_factory=LLMConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    # Account intelligence specific
    deal_health_min_metrics: int = 3
    default_owner_id: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables."""
        return cls(
            llm=LLMConfig(),
            storage=StorageConfig()
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
