from .base import BaseSettings


class TemplateSettings(BaseSettings):
    """Template directories, relative to the project root"""

    llm_path: str = "assessor/templates/llm"
