from __future__ import annotations

import pydantic as p
from pydantic_settings import BaseSettings as PydanticBaseSettings
from pydantic_settings import PydanticBaseSettingsSource, SettingsConfigDict

from assessor.model import DeploymentEnvironment

from .base import BaseSecrets, BaseSettings
from .source import AnsibleVaultSecretsSource


class PostgresqlSecrets(BaseSecrets):
    username: p.Secret[str] | None = None
    password: p.Secret[str] | None = None


class AuthSecrets(BaseSecrets):
    """Authentication secrets."""

    jwt: p.Secret[str]


class OpenAISecrets(BaseSecrets):
    secret_key: p.Secret[str]


class AnthropicSecrets(BaseSecrets):
    api_key: p.Secret[str]


class GoogleSecrets(BaseSecrets):
    """Gemini API key"""

    api_key: p.Secret[str]


class LLMSecrets(BaseSecrets):
    """LLM vendor API secrets."""

    openai: OpenAISecrets | None = None
    anthropic: AnthropicSecrets | None = None
    google: GoogleSecrets | None = None


class Secrets(BaseSettings):
    """
    Secret material is never read from source: it comes from the
    environment (ASSESSOR_AUTH__JWT, ASSESSOR_LLM__OPENAI__SECRET_KEY, ...)
    or from an encrypted secrets.vault.yaml
    """

    model_config = SettingsConfigDict(env_prefix="ASSESSOR_", env_nested_delimiter="__")

    root: p.AnyUrl
    env: DeploymentEnvironment

    auth: AuthSecrets | None = None
    llm: LLMSecrets | None = None
    postgresql: PostgresqlSecrets = PostgresqlSecrets()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[PydanticBaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, env_settings, AnsibleVaultSecretsSource(settings_cls)
