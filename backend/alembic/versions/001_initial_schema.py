"""Initial schema — repositories and builds.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "repositories",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("url", sa.String(500), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("build_counter", sa.Integer, nullable=False, server_default="0"),
        sa.Column("last_build_id", sa.Integer, nullable=True),
        sa.Column("last_build_number", sa.String(50), nullable=True),
        sa.Column("last_build_status", sa.Integer, nullable=True),
        sa.Column("last_build_started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_build_finished_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "builds",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "repository_id", sa.Integer,
            sa.ForeignKey("repositories.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "parent_id", sa.Integer,
            sa.ForeignKey("builds.id", ondelete="CASCADE"), nullable=True,
        ),
        sa.Column("number", sa.String(50), nullable=True),
        sa.Column("commit", sa.String(64), nullable=True),
        sa.Column("message", sa.Text, nullable=True),
        sa.Column("committed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("committer_name", sa.String(255), nullable=True),
        sa.Column("committer_email", sa.String(255), nullable=True),
        sa.Column("author_name", sa.String(255), nullable=True),
        sa.Column("author_email", sa.String(255), nullable=True),
        sa.Column("status", sa.Integer, nullable=True),
        sa.Column("log", sa.Text, nullable=False, server_default=""),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("config", sa.JSON, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("repository_id", "number", name="uq_builds_repository_number"),
    )
    op.create_index("ix_builds_parent_id", "builds", ["parent_id"])


def downgrade() -> None:
    op.drop_index("ix_builds_parent_id", table_name="builds")
    op.drop_table("builds")
    op.drop_table("repositories")
