__all__ = [
    "AssessorContainer",
    "BootConfiguration",
    "di",
    "LoggingProvider",
    "Settings",
    "Secrets",
    "TimestampProvider",
]


from . import di
from .config import Secrets, Settings
from .container import AssessorContainer, BootConfiguration
from .provider import LoggingProvider, TimestampProvider
