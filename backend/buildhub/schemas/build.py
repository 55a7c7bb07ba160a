"""Build Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - PushPayload requires a repository url and at least one commit
    - BuildUpdate only admits progress fields (status, timestamps, config)
    - LogAppendRequest.chars is non-empty

Design Decisions:
    - extra="forbid" on BuildUpdate: unknown fields are a client bug, not ignored
    - committer optional: the core falls back to the author
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CommitPerson(BaseModel):
    name: str | None = Field(None, max_length=255)
    email: str | None = Field(None, max_length=255)


class PushCommit(BaseModel):
    """One commit record of a push event."""
    id: str = Field(min_length=1, max_length=64)
    message: str | None = None
    timestamp: datetime | None = None
    author: CommitPerson | None = None
    committer: CommitPerson | None = None


class PushRepository(BaseModel):
    url: str = Field(min_length=1, max_length=500)

    @field_validator("url")
    @classmethod
    def strip_url(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("repository url cannot be empty or whitespace")
        return v


class PushPayload(BaseModel):
    """Push event — the last commit becomes a new build."""
    repository: PushRepository
    commits: list[PushCommit] = Field(min_length=1)
    config: dict[str, Any] | None = None


class BuildUpdate(BaseModel):
    """Progress report for a build. Only the fields actually sent are applied."""
    model_config = ConfigDict(extra="forbid")

    status: int | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    config: dict[str, Any] | None = None


class LogAppendRequest(BaseModel):
    chars: str = Field(min_length=1)
    msg_id: str | None = Field(None, max_length=255)
