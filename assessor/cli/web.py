"""Serve the HTTP API with uvicorn."""

import os
import typing as t

import uvicorn

import assessor.lib.cli as click
from assessor.core import BootConfiguration, di
from assessor.core.config import LoggingSettings, WebSettings

# uvicorn imports the app factory in a fresh interpreter (workers, reloader);
# it boots its own container from this
BOOT_ENV_VAR = "__Assessor_BOOT"


@click.group()
def web(): ...


@di.inject
def _run(
    app_name: str,
    boot_cf: BootConfiguration = di.Provide["_boot_config"],
    logging_cf: LoggingSettings = di.Provide["config.logging", di.as_(LoggingSettings)],  # noqa: B008
    web_cf: WebSettings = di.Provide["config.web", di.as_(WebSettings)],  # noqa: B008
    **uvicorn_kwargs: t.Any,
) -> None:
    app_cf = getattr(web_cf, app_name, None)
    if app_cf is None:
        raise click.ClickException(f"unknown app '{app_name}': no web.{app_name} section in web.yaml")

    os.environ[BOOT_ENV_VAR] = boot_cf.model_dump_json()
    uvicorn.run(
        f"assessor.web.{app_name}.main:create_app",
        factory=True,
        host=str(app_cf.backend.host),
        port=app_cf.backend.port,
        log_config=logging_cf.model_dump(),
        **uvicorn_kwargs,
    )


@web.command(name="serve")
@click.argument("app_name", default="assessor")
@click.option("-w", "--workers", type=click.IntRange(min=1), default=1)
def serve(app_name: str, workers: int):
    """Start the API server."""
    _run(app_name, workers=workers)


@web.command(name="develop")
@click.argument("app_name", default="assessor")
def develop(app_name: str):
    """Start the API server, reloading on source changes."""
    _run(app_name, reload=True, reload_dirs=["assessor"])
