__all__ = [
    "AssessorWebSettings",
    "AuthSettings",
    "LLMSettings",
    "LoggingSettings",
    "ModelSettings",
    "Secrets",
    "Settings",
    "StorageSettings",
    "WebSettings",
]


from .llm import LLMSettings, ModelSettings
from .logging import LoggingSettings
from .secrets import Secrets
from .settings import Settings
from .storage import StorageSettings
from .web import AssessorWebSettings, AuthSettings, WebSettings
