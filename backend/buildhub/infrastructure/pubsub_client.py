"""Pub/Sub Client — Pusher-compatible REST publisher with retry, backoff, and error mapping.

Invariants:
    - Every request is signed (Pusher auth v1.0: HMAC-SHA256 over method, path, sorted query)
    - Rate limits (429), 5xx, timeouts and connection errors: retried up to max_attempts
    - Other 4xx: immediate failure, no retry
    - All failures mapped to NotificationDeliveryError (core/errors.py)

Design Decisions:
    - httpx.AsyncClient injected (or created) so tests can use MockTransport
    - ±25% jitter on backoff: prevents thundering herd when many builds finish together
    - Event data is sent as a JSON *string* inside the JSON body, as the Pusher API expects
"""

import asyncio
import hashlib
import hmac
import json
import logging
import random
import time

import httpx

from buildhub.core.errors import ErrorContext, NotificationDeliveryError

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


def sign_request(
    secret: str, method: str, path: str, params: dict[str, str],
) -> str:
    """Pusher auth signature for a request (hex HMAC-SHA256)."""
    query = "&".join(f"{key}={params[key]}" for key in sorted(params))
    to_sign = "\n".join([method.upper(), path, query])
    return hmac.new(
        secret.encode("utf-8"), to_sign.encode("utf-8"), hashlib.sha256,
    ).hexdigest()


class PusherClient:
    """Publishes events to a Pusher-compatible HTTP API."""

    def __init__(
        self,
        base_url: str,
        app_id: str,
        key: str,
        secret: str,
        max_attempts: int = 3,
        timeout_seconds: float = 5.0,
        base_delay_ms: int = 200,
        max_delay_ms: int = 2_000,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.app_id = app_id
        self.key = key
        self.secret = secret
        self.max_attempts = max(1, max_attempts)
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms
        self.client = http_client or httpx.AsyncClient(timeout=timeout_seconds)

    @property
    def events_path(self) -> str:
        return f"/apps/{self.app_id}/events"

    async def publish(self, channel: str, event: str, payload: dict) -> None:
        """Trigger `event` on `channel`, retrying transient failures."""
        body = json.dumps({
            "name": event,
            "channels": [channel],
            "data": json.dumps(payload, default=str),
        })
        context = ErrorContext(event=event)
        for attempt in range(self.max_attempts):
            try:
                response = await self.client.post(
                    f"{self.base_url}{self.events_path}",
                    content=body,
                    params=self._signed_params(body),
                    headers={"Content-Type": "application/json"},
                )
            except httpx.TimeoutException as e:
                await self._handle_transient_error(e, attempt, "timeout", context)
                continue
            except httpx.TransportError as e:
                await self._handle_transient_error(e, attempt, "connection_error", context)
                continue

            if response.status_code < 300:
                logger.debug(
                    "Published event", extra={"event": event, "attempt": attempt + 1},
                )
                return
            if response.status_code in _RETRYABLE_STATUS:
                await self._handle_transient_error(
                    RuntimeError(f"HTTP {response.status_code}"),
                    attempt, "server_error", context,
                )
                continue
            raise NotificationDeliveryError(
                f"HTTP {response.status_code}: {response.text[:200]}",
                "client_error",
                context=context,
            )

    def _signed_params(self, body: str) -> dict[str, str]:
        params = {
            "auth_key": self.key,
            "auth_timestamp": str(int(time.time())),
            "auth_version": "1.0",
            "body_md5": hashlib.md5(body.encode("utf-8")).hexdigest(),  # nosec B324
        }
        params["auth_signature"] = sign_request(
            self.secret, "POST", self.events_path, params,
        )
        return params

    async def _handle_transient_error(
        self,
        e: Exception,
        attempt: int,
        error_type: str,
        context: ErrorContext,
    ) -> None:
        """Sleep before the next attempt, or raise once attempts are exhausted."""
        if attempt + 1 >= self.max_attempts:
            raise NotificationDeliveryError(
                f"Transient failure after {self.max_attempts} attempts: {e}",
                error_type,
                context=context,
            )
        delay = self._backoff(attempt)
        logger.warning(f"Publish failed ({error_type}), retry after {delay}ms: {e}")
        await asyncio.sleep(delay / 1000)

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

    async def aclose(self) -> None:
        await self.client.aclose()


# Singleton (initialized on startup)
pubsub_client: PusherClient | None = None


def init_pubsub(settings) -> PusherClient:
    global pubsub_client
    pubsub_client = PusherClient(
        base_url=settings.pubsub_url,
        app_id=settings.pubsub_app_id,
        key=settings.pubsub_key,
        secret=settings.pubsub_secret,
        max_attempts=settings.notify_max_attempts,
        timeout_seconds=settings.notify_timeout_seconds,
        base_delay_ms=settings.notify_base_delay_ms,
        max_delay_ms=settings.notify_max_delay_ms,
    )
    return pubsub_client


def get_publisher() -> PusherClient:
    """FastAPI dependency for the pub/sub publisher."""
    if not pubsub_client:
        raise RuntimeError("Pub/sub client not initialized")
    return pubsub_client
