"""Main entry point for the assessment platform web application."""

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import assessor
from assessor.core import AssessorContainer, BootConfiguration, di
from assessor.core.config.web import AssessorWebSettings
from assessor.model import DeploymentEnvironment

from .route import router


@di.inject
def _create_app(
    config: AssessorWebSettings = di.Provide["config.web.assessor", di.as_(AssessorWebSettings)],
    env: DeploymentEnvironment = di.Provide["env"],
) -> FastAPI:
    app = FastAPI(
        title="Assessor",
        description="Assessment platform with automated and LLM-assisted scoring",
        version=assessor.__version__,
    )

    if env is DeploymentEnvironment.Local and config.frontend is not None:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[
                f"http://{config.frontend.host}:{config.frontend.port}",
                f"http://localhost:{config.frontend.port}",
            ],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(router)
    return app


def create_app() -> FastAPI:
    """Factory function for uvicorn."""
    boot_vars = os.getenv("__Assessor_BOOT")
    if boot_vars:
        boot_cf = BootConfiguration.model_validate_json(boot_vars)
        ct = AssessorContainer()
        AssessorContainer.boot(ct, **dict(boot_cf))
        ct.wire(modules=["assessor.web.assessor.main", "assessor.auth.middleware"])
        return _create_app(
            config=AssessorWebSettings(**ct.config.web.assessor()),
            env=boot_cf.env,
        )
    return _create_app()
