"""
Configuration Management

Centralized configuration for:
- Account storage backends (key-value, relational)
- LLM providers (OpenAI, Anthropic, Azure OpenAI)
- Logging
"""

from .settings import (
    Settings,
    LLMConfig,
    StorageConfig,
    LLMProviderType,
    StorageBackendType,
    get_settings
)
from .providers import LLMProvider
from .log_setup import configure_logging

__all__ = [
    "Settings",
    "LLMConfig",
    "StorageConfig",
    "LLMProviderType",
    "StorageBackendType",
    "get_settings",
    "LLMProvider",
    "configure_logging"
]
