"""Initial schema for the assessment platform

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""

import typing as t

from alembic import op
from sqlalchemy import func as f
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.schema import Column, ForeignKey
from sqlalchemy.types import JSON, Boolean, DateTime, Float, Integer, String, Text

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | t.Sequence[str] | None = None
depends_on: str | t.Sequence[str] | None = None

JSONDocument = JSON().with_variant(JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        "users",
        Column("user_id", String(22), primary_key=True),
        Column("username", String, unique=True, nullable=False),
        Column("email", String, unique=True, nullable=False),
        Column("password_hash", String, nullable=False),
        Column("role", String, nullable=False),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
    )

    op.create_table(
        "assessments",
        Column("assessment_id", String(22), primary_key=True),
        Column("title", String, nullable=False),
        Column("author_id", String(22), ForeignKey("users.user_id"), nullable=False, index=True),
        Column("questions", JSONDocument, nullable=False),
        Column("description", Text, nullable=True),
        Column("time_limit_minutes", Integer, nullable=True),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
    )

    op.create_table(
        "submissions",
        Column("submission_id", String(22), primary_key=True),
        Column("participant_id", String(22), ForeignKey("users.user_id"), nullable=False, index=True),
        Column("assessment_id", String(22), ForeignKey("assessments.assessment_id"), nullable=False, index=True),
        Column("status", String, nullable=False),
        Column("start_time", DateTime(timezone=True), nullable=False),
        Column("answers", JSONDocument, nullable=False),
        Column("results", JSONDocument, nullable=False),
        Column("categories", JSONDocument, nullable=False),
        Column("total_score", Float, nullable=False),
        Column("max_score", Float, nullable=False),
        Column("percentage", Float, nullable=False),
        Column("feedback", Text, nullable=True),
        Column("end_time", DateTime(timezone=True), nullable=True),
        Column("time_expired", Boolean, nullable=False),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("submissions")
    op.drop_table("assessments")
    op.drop_table("users")
