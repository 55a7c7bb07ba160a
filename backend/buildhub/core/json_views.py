"""JSON Views — named field-set projections of builds and repositories.

Invariants:
    - BUILD_VIEWS is the single source of truth for which build fields each view exposes
    - A matrix build additionally embeds its children under "matrix", projected as build:started
    - Datetimes are serialized as ISO 8601 strings; everything else passes through
    - Unknown build view names raise UnknownViewError

Design Decisions:
    - Projections operate on plain attribute dicts, not ORM objects: core stays IO-free
    - Repository views fall back to "default" for build-only views (job, build:queued)
"""

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from typing import Any

from buildhub.core.domain_types import JsonView
from buildhub.core.errors import UnknownViewError


_ALL_BUILD_FIELDS: tuple[str, ...] = (
    "id", "repository_id", "parent_id", "number", "commit", "message",
    "status", "log", "started_at", "committed_at",
    "committer_name", "committer_email", "author_name", "author_email",
    "config",
)

BUILD_VIEWS: dict[JsonView, tuple[str, ...]] = {
    JsonView.DEFAULT: _ALL_BUILD_FIELDS,
    JsonView.JOB: ("id", "commit", "config"),
    JsonView.QUEUED: ("id", "number"),
    JsonView.STARTED: tuple(
        f for f in _ALL_BUILD_FIELDS if f not in ("status", "log")
    ),
    JsonView.LOG: ("id",),
    JsonView.FINISHED: ("id", "status", "finished_at"),
}

_REPOSITORY_SUMMARY_FIELDS: tuple[str, ...] = (
    "last_build_id", "last_build_number", "last_build_status",
    "last_build_started_at", "last_build_finished_at",
)

REPOSITORY_VIEWS: dict[JsonView, tuple[str, ...]] = {
    JsonView.DEFAULT: ("id", "name", "url", *_REPOSITORY_SUMMARY_FIELDS),
    JsonView.STARTED: ("id", "name", "url", *_REPOSITORY_SUMMARY_FIELDS),
    JsonView.LOG: ("id",),
    JsonView.FINISHED: ("id", *_REPOSITORY_SUMMARY_FIELDS),
}


def resolve_view(view: str | JsonView | None) -> JsonView:
    """Map a `for` parameter to a JsonView (None -> default)."""
    if view is None:
        return JsonView.DEFAULT
    try:
        return JsonView(view)
    except ValueError:
        raise UnknownViewError(str(view))


def _serialize(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def project(attrs: Mapping[str, Any], field_names: Iterable[str]) -> dict[str, Any]:
    """Pick `field_names` out of `attrs` (missing fields become None)."""
    return {name: _serialize(attrs.get(name)) for name in field_names}


def project_build(
    attrs: Mapping[str, Any],
    view: str | JsonView | None = None,
    matrix: Sequence[Mapping[str, Any]] | None = None,
) -> dict[str, Any]:
    """Project a build; pass `matrix` (children attrs) only for matrix builds."""
    json = project(attrs, BUILD_VIEWS[resolve_view(view)])
    if matrix is not None:
        json["matrix"] = [
            project(child, BUILD_VIEWS[JsonView.STARTED]) for child in matrix
        ]
    return json


def project_repository(
    attrs: Mapping[str, Any], view: str | JsonView | None = None,
) -> dict[str, Any]:
    resolved = resolve_view(view)
    field_names = REPOSITORY_VIEWS.get(resolved, REPOSITORY_VIEWS[JsonView.DEFAULT])
    return project(attrs, field_names)
