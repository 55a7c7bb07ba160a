"""Build Service — the explicit save pipeline for build records.

Invariants:
    - Every save runs, in order: expand-if-needed -> persist -> sync summary -> notify
    - Matrix axes computed ONCE per save (SaveContext), never cached on the build
    - Expansion only for a top-level matrix build with zero children; children are
      committed in the same transaction as the parent
    - Summary sync failures propagate (SummarySyncError); notification failures never do
    - Log appends concatenate in the database (BuildStore.append_to_log) under the
      row lock; the per-build KeyedLocks only queue appends within this process

Design Decisions:
    - Summary sync runs before the notification so the repository projection in the
      payload already carries the new last_build_* values
    - matrix_expanded is an explicit boolean on SaveResult (children created this save)
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from buildhub.core.build_lifecycle import (
    BuildSnapshot, BuildTransition, LogAppend, EMPTY_SNAPSHOT, classify_transition,
)
from buildhub.core.child_builds import matrix_children_attrs
from buildhub.core.commit_payload import build_attrs_from_push
from buildhub.core.domain_types import JsonView, NotificationEvent
from buildhub.core.errors import (
    ErrorContext, RepositoryRequiredError, ResourceNotFoundError,
)
from buildhub.core.json_views import project_build, project_repository
from buildhub.core.matrix_axes import (
    DEFAULT_AXIS_KEYS, MatrixAxes, extract_matrix_axes, is_matrix_build,
)
from buildhub.core.matrix_expansion import expand_matrix
from buildhub.core.repository_protocols import BuildStorage
from buildhub.core.notifications import (
    EVENT_VIEWS, build_notification_payload, select_notification,
)
from buildhub.core.summary_sync import should_sync_summary, summary_fields
from buildhub.models.build import Build
from buildhub.services.build_locks import KeyedLocks, log_append_locks
from buildhub.services.notification_dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)


def snapshot_of(build: Build) -> BuildSnapshot:
    return BuildSnapshot(
        id=build.id,
        number=build.number,
        status=build.status,
        started_at=build.started_at,
        finished_at=build.finished_at,
    )


@dataclass(frozen=True)
class SaveContext:
    """Values computed once at the start of a save and passed through it."""
    before: BuildSnapshot
    axes: MatrixAxes
    log_append: LogAppend | None = None


@dataclass
class SaveResult:
    build: Build
    transition: BuildTransition
    children: list[Build] = field(default_factory=list)
    summary_synced: bool = False
    notification: NotificationEvent | None = None

    @property
    def matrix_expanded(self) -> bool:
        return bool(self.children)


class BuildService:
    """Creates and mutates builds through the save pipeline."""

    def __init__(
        self,
        store: BuildStorage,
        dispatcher: NotificationDispatcher,
        axis_keys: Sequence[str] = DEFAULT_AXIS_KEYS,
        locks: KeyedLocks = log_append_locks,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.axis_keys = tuple(axis_keys)
        self.locks = locks

    # ─── Operations ──────────────────────────────────────────────

    async def create_from_push(self, data: Mapping[str, Any]) -> SaveResult:
        """Create the build for the last commit of a push payload."""
        url = (data.get("repository") or {}).get("url")
        if not url:
            raise RepositoryRequiredError()
        repository = await self.store.find_or_create_repository(url)
        attrs = build_attrs_from_push(data)
        return await self.create_build({**attrs, "repository_id": repository.id})

    async def create_build(self, attrs: Mapping[str, Any]) -> SaveResult:
        repository_id = attrs.get("repository_id")
        if repository_id is None or not await self.store.get_repository(repository_id):
            raise RepositoryRequiredError(
                context=ErrorContext(repository_id=repository_id),
            )

        # number is storage-assigned like id: a caller-supplied value is ignored
        number = str(await self.store.next_build_number(repository_id))
        build = Build(**{**attrs, "number": number, "log": attrs.get("log") or ""})
        return await self._save(build, EMPTY_SNAPSHOT)

    async def update_build(
        self, build_id: int, changes: Mapping[str, Any],
    ) -> SaveResult:
        """Apply progress fields (status, timestamps, config) and save."""
        build = await self.get_build(build_id)
        before = snapshot_of(build)
        for name, value in changes.items():
            setattr(build, name, value)
        return await self._save(build, before)

    async def append_log(
        self, build_id: int, chars: str, msg_id: str | None = None,
    ) -> SaveResult:
        """Concatenate `chars` onto the build log and save (serialized per build)."""
        async with self.locks.for_key(build_id):
            build = await self.get_build(build_id, for_update=True)
            before = snapshot_of(build)
            await self.store.append_to_log(build_id, chars)
            # reload so the ORM copy carries the concatenated log and is not dirty
            build = await self.get_build(build_id, fresh=True)
            return await self._save(build, before, LogAppend(chars, msg_id))

    async def get_build(
        self, build_id: int, *, fresh: bool = False, for_update: bool = False,
    ) -> Build:
        build = await self.store.get_build(build_id, fresh=fresh, for_update=for_update)
        if not build:
            raise ResourceNotFoundError(
                "Build", str(build_id), ErrorContext(build_id=build_id),
            )
        return build

    async def build_json(
        self, build: Build, view: str | JsonView | None = None,
    ) -> dict[str, Any]:
        """Project a build; matrix builds embed their children."""
        axes = extract_matrix_axes(build.config, self.axis_keys)
        matrix = None
        if is_matrix_build(build.parent_id, axes):
            children = await self.store.list_children(build.id)
            matrix = [child.attributes() for child in children]
        return project_build(build.attributes(), view, matrix)

    # ─── Pipeline ────────────────────────────────────────────────

    async def _save(
        self,
        build: Build,
        before: BuildSnapshot,
        log_append: LogAppend | None = None,
    ) -> SaveResult:
        context = SaveContext(
            before=before,
            axes=extract_matrix_axes(build.config, self.axis_keys),
            log_append=log_append,
        )

        children = await self._persist(build, context)
        transition = classify_transition(
            context.before, snapshot_of(build), context.log_append,
        )
        result = SaveResult(build=build, transition=transition, children=children)

        result.summary_synced = await self._sync_summary(build, transition)
        result.notification = await self._notify(build, transition)
        return result

    async def _persist(self, build: Build, context: SaveContext) -> list[Build]:
        expand = (
            is_matrix_build(build.parent_id, context.axes)
            and not await self.store.has_children(build.id)
        )
        if not expand:
            await self.store.save(build, [])
            return []

        await self.store.flush(build)
        rows = expand_matrix(context.axes.padded())
        children = await self.store.save(
            build, matrix_children_attrs(build.attributes(), rows),
        )
        logger.info(
            f"Matrix expanded into {len(children)} builds",
            extra={
                "build_id": build.id,
                "repository_id": build.repository_id,
                "children": len(children),
            },
        )
        return children

    async def _sync_summary(self, build: Build, transition: BuildTransition) -> bool:
        last_build_id = await self.store.last_build_id(build.repository_id)
        if not should_sync_summary(last_build_id, build.id, transition.changed_fields):
            return False
        await self.store.update_repository_summary(
            build.repository_id, summary_fields(transition.after),
        )
        return True

    async def _notify(
        self, build: Build, transition: BuildTransition,
    ) -> NotificationEvent | None:
        event = select_notification(transition)
        if event is None:
            return None

        view = EVENT_VIEWS[event]
        repository = await self.store.get_repository(build.repository_id, fresh=True)
        payload = build_notification_payload(
            event,
            await self.build_json(build, view),
            project_repository(repository.attributes(), view),
            transition.log_append,
        )
        await self.dispatcher.dispatch(event, payload, build_id=build.id)
        return event
