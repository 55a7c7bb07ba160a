"""Notification Selection — verifies event priority and payload shape.

Tests:
    - Priority build:started > build:log > build:finished
    - No event for saves without a lifecycle transition
    - build:log payload carries the appended chars and msg_id
"""

from datetime import datetime, timezone

from buildhub.core.build_lifecycle import BuildSnapshot, LogAppend, classify_transition
from buildhub.core.domain_types import JsonView, NotificationEvent
from buildhub.core.notifications import (
    EVENT_VIEWS,
    build_notification_payload,
    select_notification,
)

STARTED_AT = datetime(2011, 1, 1, 12, 0, tzinfo=timezone.utc)
FINISHED_AT = datetime(2011, 1, 1, 12, 5, tzinfo=timezone.utc)

PENDING = BuildSnapshot(id=1, number="1")
STARTED = BuildSnapshot(id=1, number="1", started_at=STARTED_AT)
FINISHED = BuildSnapshot(
    id=1, number="1", status=0, started_at=STARTED_AT, finished_at=FINISHED_AT,
)


def test_started_event():
    assert select_notification(classify_transition(PENDING, STARTED)) is NotificationEvent.STARTED


def test_finished_event():
    assert select_notification(classify_transition(STARTED, FINISHED)) is NotificationEvent.FINISHED


def test_log_event():
    transition = classify_transition(STARTED, STARTED, LogAppend("output"))
    assert select_notification(transition) is NotificationEvent.LOG


def test_started_wins_over_finished():
    transition = classify_transition(PENDING, FINISHED)
    assert select_notification(transition) is NotificationEvent.STARTED


def test_started_wins_over_log_append():
    transition = classify_transition(PENDING, STARTED, LogAppend("$ bundle install\n"))
    assert transition.was_started
    assert transition.log_appended
    assert select_notification(transition) is NotificationEvent.STARTED


def test_log_wins_over_finished():
    transition = classify_transition(STARTED, FINISHED, LogAppend("done"))
    assert select_notification(transition) is NotificationEvent.LOG


def test_no_event_without_transition():
    assert select_notification(classify_transition(STARTED, STARTED)) is None
    status_only = BuildSnapshot(id=1, number="1", started_at=STARTED_AT, status=1)
    assert select_notification(classify_transition(STARTED, status_only)) is None


def test_each_event_uses_its_own_view():
    assert EVENT_VIEWS[NotificationEvent.STARTED] is JsonView.STARTED
    assert EVENT_VIEWS[NotificationEvent.LOG] is JsonView.LOG
    assert EVENT_VIEWS[NotificationEvent.FINISHED] is JsonView.FINISHED


def test_log_payload_carries_chars_and_msg_id():
    payload = build_notification_payload(
        NotificationEvent.LOG, {"id": 1}, {"id": 2}, LogAppend("$ rake\n", "m-7"),
    )
    assert payload == {
        "build": {"id": 1},
        "repository": {"id": 2},
        "log": "$ rake\n",
        "msg_id": "m-7",
    }


def test_other_payloads_have_build_and_repository_only():
    payload = build_notification_payload(
        NotificationEvent.FINISHED, {"id": 1}, {"id": 2}, LogAppend("ignored"),
    )
    assert payload == {"build": {"id": 1}, "repository": {"id": 2}}
