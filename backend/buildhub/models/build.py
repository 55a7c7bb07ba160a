"""Build ORM — one CI build record, top-level or matrix child.

Invariants:
    - repository_id is required (validated before insert by BuildService)
    - parent_id NULL => top-level build; otherwise a matrix child
    - (repository_id, number) is unique: a second expansion of the same parent collides
    - status NULL => pending; 0 => passed; anything else => failed
    - log only grows (append-log concatenates)

Design Decisions:
    - JSON column for config: heterogeneous scalars and lists stored as-is
    - No relationship() to parent/children: lookups go through BuildStore by id
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    String, Text, Integer, DateTime, JSON, ForeignKey, UniqueConstraint, Index,
)
from sqlalchemy.orm import Mapped, mapped_column

from buildhub.db.base import Base


class Build(Base):
    """Build record — mutated in place as progress reports arrive."""
    __tablename__ = "builds"
    __table_args__ = (
        UniqueConstraint("repository_id", "number", name="uq_builds_repository_number"),
        Index("ix_builds_parent_id", "parent_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    repository_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("repositories.id", ondelete="CASCADE"), nullable=False,
    )
    parent_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("builds.id", ondelete="CASCADE"), nullable=True,
    )
    number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    commit: Mapped[str | None] = mapped_column(String(64), nullable=True)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    committed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    committer_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    committer_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    author_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    author_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    status: Mapped[int | None] = mapped_column(Integer, nullable=True)
    log: Mapped[str] = mapped_column(Text, nullable=False, default="")
    started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    finished_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    config: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def attributes(self) -> dict[str, Any]:
        """All column values keyed by column name."""
        return {
            column.name: getattr(self, column.key)
            for column in self.__table__.columns
        }
