"""Pytest fixtures for assessment platform tests.

The container is booted once per session in the Test environment, which
uses an in-memory SQLite database. Every test gets freshly created tables,
dropped again when the test finishes.

Usage:
    def test_get_assessment(client: TestClient, assessment: Assessment, participant_headers: dict[str, str]):
        response = client.get(f"/api/assessments/{assessment.assessment_id}", headers=participant_headers)
        assert response.status_code == 200
"""

from __future__ import annotations

import itertools
import json
import os
import typing as t
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import jinja2
import pydantic as p
import pytest
import sqlalchemy
from fastapi import FastAPI
from fastapi.testclient import TestClient
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage
from sqlalchemy.orm import Session

import assessor
from assessor.auth import JWTManager
from assessor.core import AssessorContainer
from assessor.model import Assessment, DeploymentEnvironment, Question, QuestionType, User, UserRole
from assessor.storage import assessment as assessment_storage
from assessor.storage import user as user_storage
from assessor.storage.table import metadata

TEST_JWT_SECRET = "test-jwt-secret-for-integration-tests"


@pytest.fixture(scope="session")
def container() -> t.Generator[AssessorContainer]:
    """Boot the DI container for the test session."""
    ct = AssessorContainer()
    root = Path(os.path.dirname(assessor.__file__)).parent

    AssessorContainer.boot(
        ct,
        debug=True,
        env=DeploymentEnvironment.Test,
        config_root=p.FileUrl(f"file://{root}/config"),
        override=(),
    )
    # the test environment has no secrets file
    ct.secrets.override({"auth": {"jwt": p.Secret(TEST_JWT_SECRET)}, "postgresql": {}})

    yield ct

    ct.shutdown_resources()


@pytest.fixture(scope="session")
def app(container: AssessorContainer) -> FastAPI:
    """Create the FastAPI application from the booted container."""
    from assessor.core.config.web import AssessorWebSettings
    from assessor.web.assessor.main import _create_app  # pyright: ignore[reportPrivateUsage]

    container.wire(
        modules=[
            "assessor.web.assessor.main",
            "assessor.web.assessor.route.auth",
            "assessor.web.assessor.route.assessment",
            "assessor.web.assessor.route.submission",
            "assessor.web.assessor.route.analytics",
            "assessor.auth.middleware",
        ]
    )

    return _create_app(
        config=AssessorWebSettings(**container.config.web.assessor()),
        env=DeploymentEnvironment.Test,
    )


@pytest.fixture(scope="session")
def llm_env(container: AssessorContainer) -> jinja2.Environment:
    """Provide the LLM Jinja2 environment from the DI container."""
    return container.template().llm()


@pytest.fixture
def db_session(container: AssessorContainer) -> t.Generator[Session]:
    """Provide a session on freshly created tables."""
    engine: sqlalchemy.Engine = container.storage().persistent().engine()
    metadata.create_all(engine)
    session = Session(bind=engine, autobegin=False, expire_on_commit=False, autoflush=False)

    yield session

    session.close()
    metadata.drop_all(engine)


def evaluation_reply(score: float, max_score: float, feedback: str = "Reasonable answer.") -> AIMessage:
    return AIMessage(content=json.dumps({"score": score, "maxScore": max_score, "feedback": feedback}))


@pytest.fixture
def evaluation_model(container: AssessorContainer) -> t.Generator[MagicMock]:
    """Replace the evaluation chat model; by default every answer scores 2 out of 3."""
    model = MagicMock(spec=BaseChatModel)
    model.ainvoke = AsyncMock(return_value=evaluation_reply(2, 3))
    container.llm().evaluation_model.override(model)

    yield model

    container.llm().evaluation_model.reset_override()


@pytest.fixture
def client(app: FastAPI, db_session: Session, evaluation_model: MagicMock) -> t.Generator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


_sequence = itertools.count(1)


@pytest.fixture
def user_factory(db_session: Session) -> t.Callable[..., User]:
    """Factory fixture for creating users with unique usernames and emails.

    Usage:
        def test_something(user_factory):
            reviewer = user_factory(role=UserRole.Reviewer)
    """

    def create_user(
        username: str | None = None,
        email: str | None = None,
        password: str = "password123",
        role: UserRole = UserRole.Participant,
    ) -> User:
        n = next(_sequence)
        with db_session.begin():
            return user_storage.create(
                username=username or f"user{n}",
                email=email or f"user{n}@example.com",
                password=p.Secret(password),
                role=role,
                session=db_session,
            )

    return create_user


@pytest.fixture
def participant(user_factory: t.Callable[..., User]) -> User:
    return user_factory(username="participant", email="participant@example.com")


@pytest.fixture
def reviewer(user_factory: t.Callable[..., User]) -> User:
    return user_factory(username="reviewer", email="reviewer@example.com", role=UserRole.Reviewer)


def default_questions() -> list[Question]:
    return [
        Question(
            type=QuestionType.SingleAnswer,
            prompt="Which keyword defines a function in Python?",
            options=["func", "def", "lambda"],
            correct_answer="def",
        ),
        Question(
            type=QuestionType.FreeText,
            prompt="Explain the difference between a list and a tuple.",
            points=3,
            evaluation_criteria="Mentions mutability and typical use.",
        ),
        Question(
            type=QuestionType.CodeSubmission,
            prompt="Write a function that reverses a string.",
            points=5,
        ),
    ]


@pytest.fixture
def assessment_factory(db_session: Session, reviewer: User) -> t.Callable[..., Assessment]:
    """Factory fixture for creating assessments authored by the reviewer."""

    def create_assessment(
        title: str = "Python Basics",
        questions: list[Question] | None = None,
        time_limit_minutes: int | None = None,
        description: str | None = None,
        author: User | None = None,
    ) -> Assessment:
        with db_session.begin():
            return assessment_storage.create(
                {
                    "title": title,
                    "author_id": (author or reviewer).user_id,
                    "questions": questions if questions is not None else default_questions(),
                    "time_limit_minutes": time_limit_minutes,
                    "description": description,
                },
                session=db_session,
            )

    return create_assessment


@pytest.fixture
def assessment(assessment_factory: t.Callable[..., Assessment]) -> Assessment:
    return assessment_factory()


@pytest.fixture
def jwt_manager(container: AssessorContainer) -> JWTManager:
    return container.auth().jwt_manager()


@pytest.fixture
def auth_headers(jwt_manager: JWTManager) -> t.Callable[[User], dict[str, str]]:
    """Bearer headers for a user."""

    def headers(user: User) -> dict[str, str]:
        token, _ = jwt_manager.create_access_token(user.user_id, user.role)
        return {"Authorization": f"Bearer {token}"}

    return headers


@pytest.fixture
def participant_headers(participant: User, auth_headers: t.Callable[[User], dict[str, str]]) -> dict[str, str]:
    return auth_headers(participant)


@pytest.fixture
def reviewer_headers(reviewer: User, auth_headers: t.Callable[[User], dict[str, str]]) -> dict[str, str]:
    return auth_headers(reviewer)
