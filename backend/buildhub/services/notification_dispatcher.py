"""Notification Dispatcher — delivers the one event a save selected, without escalating.

Invariants:
    - dispatch() NEVER raises: delivery failures are logged and dropped
    - dispatch() is bounded by deadline_seconds regardless of publisher behavior
    - Only called after the triggering save has committed

Design Decisions:
    - Retry/backoff lives in the transport (PusherClient); the dispatcher only
      enforces the overall deadline and the non-escalation policy
"""

import asyncio
import logging

from buildhub.core.domain_types import NotificationEvent, PUBSUB_CHANNEL
from buildhub.core.errors import NotificationDeliveryError
from buildhub.core.repository_protocols import Publisher

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Publishes build events to the pub/sub channel."""

    def __init__(
        self,
        publisher: Publisher,
        channel: str = PUBSUB_CHANNEL,
        deadline_seconds: float = 20.0,
    ):
        self.publisher = publisher
        self.channel = channel
        self.deadline_seconds = deadline_seconds

    async def dispatch(
        self,
        event: NotificationEvent,
        payload: dict,
        build_id: int | None = None,
    ) -> bool:
        """Publish `payload` as `event`. Returns False when the event was dropped."""
        extra = {"event": event.value, "build_id": build_id}
        try:
            await asyncio.wait_for(
                self.publisher.publish(self.channel, event.value, payload),
                timeout=self.deadline_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Notification dropped: publish exceeded {self.deadline_seconds}s",
                extra=extra,
            )
            return False
        except NotificationDeliveryError as e:
            logger.warning(
                f"Notification dropped: {e.message}",
                extra={**extra, "error_code": e.code},
            )
            return False
        except Exception as e:
            logger.error(
                f"Notification dropped: unexpected publisher error: {e}",
                exc_info=True, extra=extra,
            )
            return False

        logger.info("Notification published", extra=extra)
        return True
