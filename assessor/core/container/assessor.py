from __future__ import annotations

import datetime
import os
import sys
import types
from pathlib import Path

import pydantic as p
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Container, Object, Provider, Resource, Singleton

import assessor
from assessor.model import BaseModel, DeploymentEnvironment

from ..config import Secrets, Settings
from ..di import NotReady, register_loader_containers
from ..provider import LoggingProvider, TimestampProvider
from .auth import AuthContainer
from .llm import LLMContainer
from .storage import StorageContainer
from .template import TemplateContainer


class BootConfiguration(BaseModel):
    debug: bool
    env: DeploymentEnvironment
    config_root: p.AnyUrl
    secrets_path: p.AnyUrl | None = None
    override: tuple[str, ...]


class AssessorContainer(DeclarativeContainer):
    config: Configuration = Configuration()
    secrets: Configuration = Configuration()

    debug: Provider[bool] = Singleton(bool)
    env: Provider[DeploymentEnvironment] = Singleton(DeploymentEnvironment)
    root: Object[NotReady | Path] = Object(NotReady())

    logging: Provider[LoggingProvider] = Resource(LoggingProvider, config=config.logging, debug=debug)
    storage: Provider[StorageContainer] = Container(
        StorageContainer, config=config.storage, secrets=secrets, debug=debug, logging=logging, root=root
    )
    template: Provider[TemplateContainer] = Container(TemplateContainer, config=config.template)

    # config comes from web.assessor.auth, the signing key from secrets
    auth: Provider[AuthContainer] = Container(
        AuthContainer,
        config=config.web.assessor.auth,
        secrets=secrets.auth,
    )
    llm: Provider[LLMContainer] = Container(LLMContainer, config=config.llm, secrets=secrets.llm)

    utcnow: Provider[TimestampProvider] = Object(lambda: datetime.datetime.now(datetime.UTC))

    _boot_config: Provider[BootConfiguration | NotReady] = Object(NotReady())

    @staticmethod
    def boot(
        ct: AssessorContainer,
        /,
        debug: bool,
        env: DeploymentEnvironment,
        config_root: p.FileUrl,
        secrets_path: p.AnyUrl | None = None,
        override: tuple[str, ...] | None = None,
        wiring: tuple[str | types.ModuleType, ...] | None = None,
    ):
        if config_root.scheme != "file":
            raise ValueError(f"unsupported scheme for config root: {config_root.scheme}")
        ps = Settings(env=env, root=config_root, override=override or ())
        ct.config.from_pydantic(ps)
        ct.wire(packages=["assessor"])
        if wiring:
            ct.wire(modules=wiring)
        if imported := [mod for name, mod in sys.modules.items() if name.startswith("assessor.")]:
            ct.wire(modules=imported)
        register_loader_containers(ct, packages=["assessor"])

        logger = ct.logging().get_logger()

        for ov in ps.override:
            k, v = ov.split("=", 1)
            logger.info(
                "overriding configuration parameter",
                extra={
                    "key": k,
                    "value": v,
                },
            )

        ct.debug.override(debug)
        ct.env.override(env)
        ct.root.override(Path(os.path.dirname(assessor.__file__)).parent)
        if debug:
            ct.logging().capture_warnings(True)

        secrets = Secrets(env=env, root=secrets_path or config_root)
        ct.secrets.from_pydantic(secrets)

        logger.debug(
            "configuration finished",
            extra={
                "config": str(config_root),
            },
        )
        ct._boot_config.override(
            BootConfiguration(
                debug=debug, env=env, config_root=config_root, secrets_path=secrets_path, override=override or ()
            )
        )
