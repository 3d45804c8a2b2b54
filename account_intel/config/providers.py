"""
Chat Model Provider Factory

Provides a unified interface for the chat models used by transcript
analysis (OpenAI, Anthropic, Azure OpenAI), including structured
output bound to a Pydantic schema.
"""

from typing import Type

from pydantic import BaseModel

from .settings import LLMConfig, LLMProviderType, get_settings


class LLMProvider:
    """
    Factory for chat models using LangChain.

    Supports:
    - OpenAI (GPT-4o, GPT-4o-mini)
    - Anthropic (Claude 3.5)
    - Azure OpenAI
    """

    def __init__(self, config: LLMConfig = None):
        self.config = config or get_settings().llm
        self._chat_model = None

    def get_chat_model(self):
        """Get chat model instance (lazy initialization)."""
        if self._chat_model is None:
            self._chat_model = self._create_chat_model()
        return self._chat_model

    def _create_chat_model(self):
        """Create chat model based on provider configuration."""
        provider = self.config.provider

        if provider == LLMProviderType.OPENAI:
            return self._create_openai_chat()
        elif provider == LLMProviderType.ANTHROPIC:
            return self._create_anthropic_chat()
        elif provider == LLMProviderType.AZURE_OPENAI:
            return self._create_azure_openai_chat()
        else:
            raise ValueError(f"Unsupported LLM provider: {provider}")

    def _secret(self, value):
        return value.get_secret_value() if value else None

    def _create_openai_chat(self):
        """Create OpenAI Chat model."""
        try:
            from langchain_openai import ChatOpenAI
        except ImportError:
            raise ImportError("Install langchain-openai: pip install langchain-openai")

        return ChatOpenAI(
            model=self.config.model_name,
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
            api_key=self._secret(self.config.openai_api_key),
            timeout=self.config.timeout
        )

    def _create_anthropic_chat(self):
        """Create Anthropic Chat model."""
        try:
            from langchain_anthropic import ChatAnthropic
        except ImportError:
            raise ImportError("Install langchain-anthropic: pip install langchain-anthropic")

        return ChatAnthropic(
            model=self.config.model_name or "claude-3-5-sonnet-20241022",
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
            api_key=self._secret(self.config.anthropic_api_key),
            timeout=self.config.timeout
        )

    def _create_azure_openai_chat(self):
        """Create Azure OpenAI Chat model."""
        try:
            from langchain_openai import AzureChatOpenAI
        except ImportError:
            raise ImportError("Install langchain-openai: pip install langchain-openai")

        return AzureChatOpenAI(
            azure_endpoint=self.config.azure_endpoint,
            azure_deployment=self.config.azure_deployment_name,
            api_version=self.config.azure_api_version,
            api_key=self._secret(self.config.openai_api_key),
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens
        )

    def with_structured_output(self, schema: Type[BaseModel]):
        """
        Get chat model with structured output support.

        Uses LangChain's with_structured_output for Pydantic model outputs.
        """
        chat = self.get_chat_model()

        if hasattr(chat, "with_structured_output"):
            return chat.with_structured_output(schema)

        # Fallback for models that don't support it natively
        from langchain_core.output_parsers import PydanticOutputParser
        parser = PydanticOutputParser(pydantic_object=schema)
        return chat | parser
