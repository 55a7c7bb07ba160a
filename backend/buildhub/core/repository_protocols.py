"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: implementations do IO; the pure functions that decide
      what to store or publish are never async themselves
"""

from typing import Any, Protocol


class BuildLike(Protocol):
    """Structural contract for Build objects moved through the save pipeline."""
    id: int | None
    repository_id: int | None
    parent_id: int | None
    number: str | None
    status: int | None
    log: str
    config: dict | None

    def attributes(self) -> dict[str, Any]: ...


class RepositoryLike(Protocol):
    id: int
    url: str
    name: str

    def attributes(self) -> dict[str, Any]: ...


class BuildStorage(Protocol):
    """Contract for build/repository persistence — implemented by shell."""
    async def find_or_create_repository(self, url: str) -> RepositoryLike: ...
    async def get_repository(
        self, repository_id: int, *, fresh: bool = False,
    ) -> RepositoryLike | None: ...
    async def get_build(
        self, build_id: int, *, fresh: bool = False, for_update: bool = False,
    ) -> BuildLike | None: ...
    async def append_to_log(self, build_id: int, chars: str) -> None: ...
    async def next_build_number(self, repository_id: int) -> int: ...
    async def count_builds(self, repository_id: int) -> int: ...
    async def has_children(self, build_id: int) -> bool: ...
    async def list_children(self, build_id: int) -> list[BuildLike]: ...
    async def list_builds(
        self, repository_id: int, *, started_only: bool = False,
    ) -> list[BuildLike]: ...
    async def last_build_id(self, repository_id: int) -> int | None: ...
    async def flush(self, build: BuildLike) -> None: ...
    async def save(
        self, build: BuildLike, children_attrs: list[dict[str, Any]],
    ) -> list[BuildLike]: ...
    async def update_repository_summary(
        self, repository_id: int, fields: dict[str, Any],
    ) -> None: ...


class Publisher(Protocol):
    """Contract for the pub/sub transport — fire-and-forget publish."""
    async def publish(self, channel: str, event: str, payload: dict) -> None: ...
