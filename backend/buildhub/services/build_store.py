"""Build Store — SQLAlchemy implementation of the BuildStorage protocol.

Invariants:
    - save() commits the build and its matrix children in ONE transaction
    - next_build_number() increments repositories.build_counter with a single UPDATE
      inside the caller's transaction (row lock held until commit)
    - Uniqueness violations surface as ConcurrencyError, never as raw IntegrityError
    - update_repository_summary() failures surface as SummarySyncError

Design Decisions:
    - Parent/children resolved by parent_id queries (arena-style), no ORM relationship
    - fresh=True uses populate_existing so reads see committed state;
      for_update=True additionally takes the row lock (SELECT ... FOR UPDATE)
    - append_to_log() concatenates in the database: concurrent appends from
      different processes cannot overwrite each other
"""

import logging
from typing import Any

from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from buildhub.core.commit_payload import repository_name_from_url
from buildhub.core.errors import ConcurrencyError, ErrorContext, SummarySyncError
from buildhub.models.build import Build
from buildhub.models.repository import Repository

logger = logging.getLogger(__name__)


class BuildStore:
    """Build and repository persistence over one AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Repositories ────────────────────────────────────────────

    async def find_or_create_repository(self, url: str) -> Repository:
        result = await self.db.execute(
            select(Repository).where(Repository.url == url),
        )
        repository = result.scalar_one_or_none()
        if repository:
            return repository

        repository = Repository(
            url=url, name=repository_name_from_url(url), build_counter=0,
        )
        self.db.add(repository)
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise ConcurrencyError(f"Repository '{url}' was created concurrently")
        logger.info(
            f"Repository created: {repository.name}",
            extra={"repository_id": repository.id},
        )
        return repository

    async def get_repository(
        self, repository_id: int, *, fresh: bool = False,
    ) -> Repository | None:
        query = select(Repository).where(Repository.id == repository_id)
        if fresh:
            query = query.execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def next_build_number(self, repository_id: int) -> int:
        await self.db.execute(
            update(Repository)
            .where(Repository.id == repository_id)
            .values(build_counter=Repository.build_counter + 1),
        )
        result = await self.db.execute(
            select(Repository.build_counter).where(Repository.id == repository_id),
        )
        return result.scalar_one()

    async def update_repository_summary(
        self, repository_id: int, fields: dict[str, Any],
    ) -> None:
        try:
            await self.db.execute(
                update(Repository)
                .where(Repository.id == repository_id)
                .values(**fields),
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise SummarySyncError(
                str(e),
                context=ErrorContext(
                    repository_id=repository_id,
                    build_id=fields.get("last_build_id"),
                ),
            ) from e

    # ─── Builds ──────────────────────────────────────────────────

    async def get_build(
        self, build_id: int, *, fresh: bool = False, for_update: bool = False,
    ) -> Build | None:
        query = select(Build).where(Build.id == build_id)
        if for_update:
            query = query.with_for_update()
        if fresh or for_update:
            query = query.execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def append_to_log(self, build_id: int, chars: str) -> None:
        """Concatenate onto builds.log in a single UPDATE, inside the caller's transaction."""
        await self.db.execute(
            update(Build)
            .where(Build.id == build_id)
            .values(log=func.coalesce(Build.log, "") + chars)
            .execution_options(synchronize_session=False),
        )

    async def count_builds(self, repository_id: int) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(Build)
            .where(Build.repository_id == repository_id),
        )
        return result.scalar_one()

    async def has_children(self, build_id: int | None) -> bool:
        if build_id is None:
            return False
        result = await self.db.execute(
            select(Build.id).where(Build.parent_id == build_id).limit(1),
        )
        return result.scalar_one_or_none() is not None

    async def list_children(self, build_id: int) -> list[Build]:
        result = await self.db.execute(
            select(Build).where(Build.parent_id == build_id).order_by(Build.id),
        )
        return list(result.scalars().all())

    async def list_builds(
        self, repository_id: int, *, started_only: bool = False,
    ) -> list[Build]:
        """Top-level builds of a repository, newest first."""
        query = (
            select(Build)
            .where(Build.repository_id == repository_id)
            .where(Build.parent_id.is_(None))
        )
        if started_only:
            query = query.where(Build.started_at.is_not(None))
        result = await self.db.execute(query.order_by(Build.id.desc()))
        return list(result.scalars().all())

    async def last_build_id(self, repository_id: int) -> int | None:
        """Id of the repository's most recent top-level build."""
        result = await self.db.execute(
            select(func.max(Build.id))
            .where(Build.repository_id == repository_id)
            .where(Build.parent_id.is_(None)),
        )
        return result.scalar_one_or_none()

    async def flush(self, build: Build) -> None:
        """Assign the build an id without committing."""
        self.db.add(build)
        try:
            await self.db.flush()
        except IntegrityError as e:
            conflict = self._conflict(build, e)
            await self.db.rollback()
            raise conflict

    async def save(
        self, build: Build, children_attrs: list[dict[str, Any]],
    ) -> list[Build]:
        """Persist the build plus any new matrix children, then commit."""
        children = [Build(**attrs) for attrs in children_attrs]
        self.db.add(build)
        self.db.add_all(children)
        try:
            await self.db.commit()
        except IntegrityError as e:
            conflict = self._conflict(build, e)
            await self.db.rollback()
            raise conflict
        return children

    @staticmethod
    def _conflict(build: Build, e: IntegrityError) -> ConcurrencyError:
        logger.warning(
            f"Build save conflicted: {e.orig}",
            extra={"build_id": build.id, "repository_id": build.repository_id},
        )
        return ConcurrencyError(
            f"Build number '{build.number}' already exists for this repository",
            context=ErrorContext(build_id=build.id, repository_id=build.repository_id),
        )
