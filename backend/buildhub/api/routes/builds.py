"""Build Routes — create from push, project, report progress, append log.

Invariants:
    - Every mutation goes through BuildService (the save pipeline)
    - `for` query parameter selects the JSON view (default when absent)
    - Notification delivery failures never change the response status

Design Decisions:
    - PATCH applies only fields present in the body (exclude_unset)
"""

import logging

from fastapi import APIRouter, Depends, Query, status

from buildhub.api.dependencies import get_build_service
from buildhub.schemas.build import BuildUpdate, LogAppendRequest, PushPayload
from buildhub.services.build_service import BuildService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/builds", tags=["builds"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_build(
    body: PushPayload, service: BuildService = Depends(get_build_service),
):
    """Create a build from the last commit of a push event."""
    result = await service.create_from_push(body.model_dump())
    logger.info(
        f"Build {result.build.number} created",
        extra={
            "build_id": result.build.id,
            "repository_id": result.build.repository_id,
            "children": len(result.children),
        },
    )
    return await service.build_json(result.build)


@router.get("/{build_id}")
async def get_build(
    build_id: int,
    view: str | None = Query(None, alias="for"),
    service: BuildService = Depends(get_build_service),
):
    """Get a build projected through the requested view."""
    build = await service.get_build(build_id)
    return await service.build_json(build, view)


@router.patch("/{build_id}")
async def update_build(
    build_id: int,
    body: BuildUpdate,
    service: BuildService = Depends(get_build_service),
):
    """Apply a progress report (started/finished timestamps, status, config)."""
    result = await service.update_build(build_id, body.model_dump(exclude_unset=True))
    return {
        "build": await service.build_json(result.build),
        "notification": result.notification.value if result.notification else None,
        "matrix_expanded": result.matrix_expanded,
    }


@router.post("/{build_id}/log")
async def append_log(
    build_id: int,
    body: LogAppendRequest,
    service: BuildService = Depends(get_build_service),
):
    """Append a chunk of log output."""
    result = await service.append_log(build_id, body.chars, body.msg_id)
    return {
        "id": result.build.id,
        "log_length": len(result.build.log),
        "notification": result.notification.value if result.notification else None,
    }
