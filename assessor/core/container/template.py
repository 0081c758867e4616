from __future__ import annotations

import pathlib

import jinja2
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Provider, ThreadSafeSingleton

import assessor.lib.json
from assessor.core import di


@di.inject
def provide_prompt_env(template_path: str, root_path: pathlib.Path = di.Provide["root"]) -> jinja2.Environment:
    """Jinja2 environment for evaluation prompts.

    Prompts are plain text sent to a chat model: nothing is escaped, and a
    variable missing from the render context is an error.
    """
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(root_path / template_path),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=False,
        undefined=jinja2.StrictUndefined,
    )
    env.policies["json.dumps_function"] = assessor.lib.json.dumps
    return env


class TemplateContainer(DeclarativeContainer):
    config: Configuration = Configuration(strict=True)
    llm: Provider[jinja2.Environment] = ThreadSafeSingleton(provide_prompt_env, config.llm_path)
