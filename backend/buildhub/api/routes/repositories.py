"""Repository Routes — repository summary and its top-level builds."""

from fastapi import APIRouter, Depends, Query

from buildhub.api.dependencies import get_build_service
from buildhub.core.errors import ResourceNotFoundError
from buildhub.core.json_views import project_repository
from buildhub.services.build_service import BuildService

router = APIRouter(prefix="/api/v1/repositories", tags=["repositories"])


async def _get_repository_or_404(repository_id: int, service: BuildService):
    repository = await service.store.get_repository(repository_id)
    if not repository:
        raise ResourceNotFoundError("Repository", str(repository_id))
    return repository


@router.get("/{repository_id}")
async def get_repository(
    repository_id: int, service: BuildService = Depends(get_build_service),
):
    """Repository with its denormalized last-build summary."""
    repository = await _get_repository_or_404(repository_id, service)
    return {
        **project_repository(repository.attributes()),
        "builds_count": await service.store.count_builds(repository_id),
    }


@router.get("/{repository_id}/builds")
async def list_repository_builds(
    repository_id: int,
    started: bool = Query(False),
    view: str | None = Query(None, alias="for"),
    service: BuildService = Depends(get_build_service),
):
    """Top-level builds, newest first; `started=true` keeps only started builds."""
    await _get_repository_or_404(repository_id, service)
    builds = await service.store.list_builds(repository_id, started_only=started)
    return {"builds": [await service.build_json(build, view) for build in builds]}
