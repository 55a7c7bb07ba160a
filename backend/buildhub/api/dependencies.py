"""API Dependencies — wires a BuildService per request.

Invariants:
    - One BuildStore (and so one AsyncSession) per request
    - Publisher is the process-wide PusherClient singleton
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from buildhub.config import get_settings
from buildhub.core.repository_protocols import Publisher
from buildhub.infrastructure.database import get_db
from buildhub.infrastructure.pubsub_client import get_publisher
from buildhub.services.build_service import BuildService
from buildhub.services.build_store import BuildStore
from buildhub.services.notification_dispatcher import NotificationDispatcher


def get_build_service(
    db: AsyncSession = Depends(get_db),
    publisher: Publisher = Depends(get_publisher),
) -> BuildService:
    settings = get_settings()
    dispatcher = NotificationDispatcher(
        publisher,
        channel=settings.pubsub_channel,
        deadline_seconds=settings.notify_deadline_seconds,
    )
    return BuildService(
        BuildStore(db), dispatcher, axis_keys=settings.matrix_axis_keys,
    )
