import pydantic as p
from pydantic_settings import BaseSettings as PydanticBaseSettings
from pydantic_settings import PydanticBaseSettingsSource

from assessor.model import DeploymentEnvironment

from .base import BaseSettings
from .llm import LLMSettings
from .logging import LoggingSettings
from .source import OverrideSettingsSource, YAMLCascadingSettingsSource
from .storage import StorageSettings
from .template import TemplateSettings
from .web import WebSettings

SettingsField = p.Field(default=..., validate_default=True)


class Settings(BaseSettings):
    """Application configuration: the YAML cascade under `root`, then `key=value` overrides"""

    root: p.FileUrl
    env: DeploymentEnvironment
    override: tuple[str, ...]

    logging: LoggingSettings = SettingsField
    storage: StorageSettings = SettingsField
    web: WebSettings = SettingsField
    llm: LLMSettings = LLMSettings()
    template: TemplateSettings = TemplateSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[PydanticBaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, YAMLCascadingSettingsSource(settings_cls), OverrideSettingsSource(settings_cls)
