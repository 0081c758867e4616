"""LLM configuration settings."""

from __future__ import annotations

import typing as t

import annotated_types as ant

from assessor.llm.provider import ProviderType

from .base import BaseSettings


class ModelSettings(BaseSettings):
    """Settings for a specific model."""

    provider: ProviderType = ProviderType.OpenAI
    model: str = "gpt-4o-mini"
    max_tokens: int = 1024
    temperature: float = 0.2
    max_retries: t.Annotated[int, ant.Ge(0)] = 0
    timeout_seconds: t.Annotated[float, ant.Gt(0)] = 30.0


class EvaluationModels(BaseSettings):
    """Model configuration per task; answer grading is the only task."""

    evaluation: ModelSettings = ModelSettings()


class LLMSettings(BaseSettings):
    """Root LLM configuration."""

    models: EvaluationModels = EvaluationModels()
