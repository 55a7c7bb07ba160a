"""Notification Selection — picks the one event a save announces and shapes its payload.

Invariants:
    - At most one event per save
    - Priority: build:started > build:log > build:finished (first match wins)
    - build:log payload carries the appended chars and the message id
    - select_notification is PURE: the shell performs delivery

Design Decisions:
    - Payload built from already-projected build/repository dicts, so the
      event -> view mapping lives in one place (EVENT_VIEWS)
"""

from typing import Any

from buildhub.core.build_lifecycle import BuildTransition, LogAppend
from buildhub.core.domain_types import JsonView, NotificationEvent


EVENT_VIEWS: dict[NotificationEvent, JsonView] = {
    NotificationEvent.STARTED: JsonView.STARTED,
    NotificationEvent.LOG: JsonView.LOG,
    NotificationEvent.FINISHED: JsonView.FINISHED,
}


def select_notification(transition: BuildTransition) -> NotificationEvent | None:
    """Return the event this save should announce, or None."""
    if transition.was_started:
        return NotificationEvent.STARTED
    if transition.log_appended:
        return NotificationEvent.LOG
    if transition.was_finished:
        return NotificationEvent.FINISHED
    return None


def build_notification_payload(
    event: NotificationEvent,
    build_json: dict[str, Any],
    repository_json: dict[str, Any],
    log_append: LogAppend | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {"build": build_json, "repository": repository_json}
    if event is NotificationEvent.LOG and log_append is not None:
        payload["log"] = log_append.chars
        payload["msg_id"] = log_append.msg_id
    return payload
