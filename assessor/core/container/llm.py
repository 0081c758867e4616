"""LLM container for dependency injection."""

from __future__ import annotations

import pydantic as p
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Provider, Singleton
from langchain_core.language_models import BaseChatModel

from assessor.llm.provider import ProviderType

from ..config.llm import ModelSettings


def create_chat_model(
    config: ModelSettings,
    *,
    openai_api_key: p.Secret[str] | None = None,
    anthropic_api_key: p.Secret[str] | None = None,
    google_api_key: p.Secret[str] | None = None,
) -> BaseChatModel:
    """Create a LangChain chat model from configuration.

    Args:
        config: Model configuration
        openai_api_key: OpenAI API key (required for OpenAI models)
        anthropic_api_key: Anthropic API key (required for Anthropic models)
        google_api_key: Gemini API key (required for Google models)

    Returns:
        Configured LangChain chat model
    """
    if config.provider == ProviderType.OpenAI:
        from langchain_openai import ChatOpenAI

        if openai_api_key is None:
            raise ValueError("OpenAI API key required for OpenAI provider")

        return ChatOpenAI(
            model=config.model,
            temperature=config.temperature,
            max_completion_tokens=config.max_tokens,
            timeout=config.timeout_seconds,
            max_retries=config.max_retries,
            api_key=p.SecretStr(openai_api_key.get_secret_value()),
        )
    elif config.provider == ProviderType.Anthropic:
        from langchain_anthropic import ChatAnthropic

        if anthropic_api_key is None:
            raise ValueError("Anthropic API key required for Anthropic provider")

        return ChatAnthropic(
            model_name=config.model,
            temperature=config.temperature,
            max_tokens_to_sample=config.max_tokens,
            timeout=config.timeout_seconds,
            max_retries=config.max_retries,
            api_key=p.SecretStr(anthropic_api_key.get_secret_value()),
            stop=None,
        )
    elif config.provider == ProviderType.Google:
        from langchain_google_genai import ChatGoogleGenerativeAI

        if google_api_key is None:
            raise ValueError("Google API key required for Google provider")

        return ChatGoogleGenerativeAI(
            model=config.model,
            temperature=config.temperature,
            max_output_tokens=config.max_tokens,
            timeout=config.timeout_seconds,
            max_retries=config.max_retries,
            google_api_key=p.SecretStr(google_api_key.get_secret_value()),
        )
    else:
        raise ValueError(f"Unsupported provider: {config.provider}")


class LLMContainer(DeclarativeContainer):
    """Container for LLM services."""

    config: Configuration = Configuration()
    secrets: Configuration = Configuration()

    evaluation_model: Provider[BaseChatModel] = Singleton(
        create_chat_model,
        config=config.models.evaluation.as_(ModelSettings),
        openai_api_key=secrets.openai.secret_key,
        anthropic_api_key=secrets.anthropic.api_key,
        google_api_key=secrets.google.api_key,
    )
