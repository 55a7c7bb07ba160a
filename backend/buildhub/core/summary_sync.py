"""Repository Summary Sync — decides when a build's fields must be mirrored.

Invariants:
    - Sync only from the repository's last build (most recent top-level build)
    - Sync only when number, status, started_at or finished_at changed
    - summary_fields() always writes all five last_build_* columns together
"""

from typing import Any

from buildhub.core.build_lifecycle import BuildSnapshot
from buildhub.core.domain_types import TRACKED_SUMMARY_FIELDS


def should_sync_summary(
    last_build_id: int | None,
    build_id: int | None,
    changed: frozenset[str],
) -> bool:
    if build_id is None or last_build_id != build_id:
        return False
    return bool(changed & TRACKED_SUMMARY_FIELDS)


def summary_fields(snapshot: BuildSnapshot) -> dict[str, Any]:
    """Denormalized repository columns for the given build snapshot."""
    return {
        "last_build_id": snapshot.id,
        "last_build_number": snapshot.number,
        "last_build_status": snapshot.status,
        "last_build_started_at": snapshot.started_at,
        "last_build_finished_at": snapshot.finished_at,
    }
