"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - BuildId, RepositoryId wrap ints — storage assigns them
    - Notification events and projection views encoded as Enums — no raw string matching
    - TRACKED_SUMMARY_FIELDS is the single source for summary-relevant columns

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: event names and view names serialize to JSON without custom encoders
"""

from enum import Enum
from typing import Any, NewType


# ─── Identity Types ──────────────────────────────────────────────

BuildId = NewType("BuildId", int)
RepositoryId = NewType("RepositoryId", int)


# ─── Value Types ─────────────────────────────────────────────────

AxisValue = tuple[str, Any]          # (axis key, value): one cell of a matrix row
MatrixRow = list[AxisValue]


# ─── Enums ───────────────────────────────────────────────────────

class BuildState(str, Enum):
    """Derived lifecycle state — never stored, re-derived from timestamps."""
    PENDING = "pending"
    STARTED = "started"
    FINISHED = "finished"


class NotificationEvent(str, Enum):
    """Events pushed to the pub/sub channel. At most one per save."""
    STARTED = "build:started"
    LOG = "build:log"
    FINISHED = "build:finished"


class JsonView(str, Enum):
    """Named field sets selected by the `for` parameter."""
    DEFAULT = "default"
    JOB = "job"
    QUEUED = "build:queued"
    STARTED = "build:started"
    LOG = "build:log"
    FINISHED = "build:finished"


# ─── Constants ───────────────────────────────────────────────────

TRACKED_SUMMARY_FIELDS: frozenset[str] = frozenset(
    {"number", "status", "started_at", "finished_at"},
)

PUBSUB_CHANNEL = "repositories"
