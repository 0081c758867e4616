__all__ = [
    "AssessorContainer",
    "AuthContainer",
    "BootConfiguration",
    "LLMContainer",
    "StorageContainer",
    "TemplateContainer",
]

from .assessor import AssessorContainer, BootConfiguration
from .auth import AuthContainer
from .llm import LLMContainer
from .storage import StorageContainer
from .template import TemplateContainer
