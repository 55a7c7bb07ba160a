"""Repository ORM — the owner of builds plus a denormalized last-build summary.

Invariants:
    - url is unique (find-or-create key)
    - build_counter only ever grows; each top-level build takes the next value
    - last_build_* columns mirror the most recent top-level build (see summary_sync)

Design Decisions:
    - build_counter column instead of COUNT(*): incremented with a single
      UPDATE inside the creating transaction, so concurrent pushes get distinct numbers
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from buildhub.db.base import Base


class Repository(Base):
    """Repository aggregate — builds reference it by repository_id."""
    __tablename__ = "repositories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    url: Mapped[str] = mapped_column(String(500), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    build_counter: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )

    last_build_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    last_build_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    last_build_status: Mapped[int | None] = mapped_column(Integer, nullable=True)
    last_build_started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    last_build_finished_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def attributes(self) -> dict[str, Any]:
        return {
            column.name: getattr(self, column.key)
            for column in self.__table__.columns
        }
