"""Build Lifecycle — derives state and per-save transition flags from field values.

Invariants:
    - State is never stored: pending/started/finished re-derived from timestamps
    - is_pending means "not finished", so a started build is pending while
      build_state() reports STARTED; the two answer different questions
    - was_started / was_finished compare the persisted snapshot with the new one
    - log_appended is only true while the append-log save that produced it runs
    - passed <=> status == 0 exactly (negative codes are failures)
    - Timestamps compared in UTC so naive DB values match aware request values

Design Decisions:
    - Explicit before/after BuildSnapshot instead of ORM dirty tracking:
      the save pipeline takes both snapshots deliberately
    - EMPTY_SNAPSHOT stands in for "not persisted yet", so every non-null
      field of a new build counts as changed
"""

from dataclasses import dataclass, fields
from datetime import datetime, timezone

from buildhub.core.domain_types import BuildState


def as_utc(value: datetime | None) -> datetime | None:
    """Normalize a timestamp to aware UTC (naive values are taken as UTC)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class BuildSnapshot:
    """The lifecycle-relevant fields of a build at one point in time."""
    id: int | None = None
    number: str | None = None
    status: int | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None

    def __post_init__(self):
        object.__setattr__(self, "started_at", as_utc(self.started_at))
        object.__setattr__(self, "finished_at", as_utc(self.finished_at))


EMPTY_SNAPSHOT = BuildSnapshot()


@dataclass(frozen=True)
class LogAppend:
    """One append-log operation: the appended chars and the message id."""
    chars: str
    msg_id: str | None = None


@dataclass(frozen=True)
class BuildTransition:
    """Transition flags computed for exactly one save."""
    before: BuildSnapshot
    after: BuildSnapshot
    changed_fields: frozenset[str]
    log_append: LogAppend | None = None

    @property
    def was_started(self) -> bool:
        return is_started(self.after) and "started_at" in self.changed_fields

    @property
    def was_finished(self) -> bool:
        return is_finished(self.after) and "finished_at" in self.changed_fields

    @property
    def log_appended(self) -> bool:
        return bool(self.log_append and self.log_append.chars)


def is_started(snapshot: BuildSnapshot) -> bool:
    return snapshot.started_at is not None


def is_finished(snapshot: BuildSnapshot) -> bool:
    return snapshot.finished_at is not None


def is_pending(snapshot: BuildSnapshot) -> bool:
    return not is_finished(snapshot)


def is_passed(status: int | None) -> bool:
    # bool is an int subclass; True must not read as a status code
    return not isinstance(status, bool) and status == 0


def build_color(snapshot: BuildSnapshot) -> str:
    if is_pending(snapshot):
        return ""
    return "green" if is_passed(snapshot.status) else "red"


def build_state(snapshot: BuildSnapshot) -> BuildState:
    if is_finished(snapshot):
        return BuildState.FINISHED
    if is_started(snapshot):
        return BuildState.STARTED
    return BuildState.PENDING


def changed_fields(before: BuildSnapshot, after: BuildSnapshot) -> frozenset[str]:
    """Names of snapshot fields whose value differs between two snapshots."""
    return frozenset(
        f.name for f in fields(BuildSnapshot)
        if getattr(before, f.name) != getattr(after, f.name)
    )


def classify_transition(
    before: BuildSnapshot,
    after: BuildSnapshot,
    log_append: LogAppend | None = None,
) -> BuildTransition:
    """Compute the transition flags for one save."""
    return BuildTransition(
        before=before,
        after=after,
        changed_fields=changed_fields(before, after),
        log_append=log_append,
    )
