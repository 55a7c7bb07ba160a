"""Build Lifecycle — verifies derived state and per-save transition flags.

Tests:
    - pending/started/finished derived from timestamps only
    - passed only for status exactly 0; color follows finished + passed
    - was_started / was_finished require the timestamp to change in this save
    - log_appended only for non-empty appends
    - Naive and aware timestamps for the same instant do not count as a change
"""

from datetime import datetime, timezone

from buildhub.core.build_lifecycle import (
    EMPTY_SNAPSHOT,
    BuildSnapshot,
    LogAppend,
    as_utc,
    build_color,
    build_state,
    changed_fields,
    classify_transition,
    is_passed,
    is_pending,
)
from buildhub.core.domain_types import BuildState

STARTED_AT = datetime(2011, 1, 1, 12, 0, tzinfo=timezone.utc)
FINISHED_AT = datetime(2011, 1, 1, 12, 5, tzinfo=timezone.utc)


# ─── Derived state ───────────────────────────────────────────────

def test_new_build_is_pending():
    snapshot = BuildSnapshot(id=1, number="1")
    assert build_state(snapshot) is BuildState.PENDING
    assert is_pending(snapshot)
    assert build_color(snapshot) == ""


def test_started_build_is_still_pending():
    snapshot = BuildSnapshot(id=1, started_at=STARTED_AT)
    assert build_state(snapshot) is BuildState.STARTED
    assert is_pending(snapshot)


def test_finished_build_state():
    snapshot = BuildSnapshot(id=1, started_at=STARTED_AT, finished_at=FINISHED_AT)
    assert build_state(snapshot) is BuildState.FINISHED
    assert not is_pending(snapshot)


def test_passed_only_for_zero():
    assert is_passed(0)
    assert not is_passed(1)
    assert not is_passed(-1)
    assert not is_passed(None)
    assert not is_passed(False)


def test_color_of_finished_builds():
    passed = BuildSnapshot(id=1, status=0, finished_at=FINISHED_AT)
    failed = BuildSnapshot(id=1, status=1, finished_at=FINISHED_AT)
    assert build_color(passed) == "green"
    assert build_color(failed) == "red"


def test_color_ignores_status_until_finished():
    assert build_color(BuildSnapshot(id=1, status=0)) == ""


# ─── Transitions ─────────────────────────────────────────────────

def test_start_transition():
    before = BuildSnapshot(id=1, number="1")
    after = BuildSnapshot(id=1, number="1", started_at=STARTED_AT)
    transition = classify_transition(before, after)
    assert transition.was_started
    assert not transition.was_finished
    assert not transition.log_appended
    assert transition.changed_fields == frozenset({"started_at"})


def test_already_started_build_is_not_started_again():
    before = BuildSnapshot(id=1, started_at=STARTED_AT)
    after = BuildSnapshot(id=1, started_at=STARTED_AT, status=0)
    transition = classify_transition(before, after)
    assert not transition.was_started
    assert transition.changed_fields == frozenset({"status"})


def test_finish_transition():
    before = BuildSnapshot(id=1, started_at=STARTED_AT)
    after = BuildSnapshot(id=1, started_at=STARTED_AT, status=0, finished_at=FINISHED_AT)
    transition = classify_transition(before, after)
    assert transition.was_finished
    assert not transition.was_started


def test_start_and_finish_in_one_save():
    before = BuildSnapshot(id=1)
    after = BuildSnapshot(id=1, started_at=STARTED_AT, finished_at=FINISHED_AT)
    transition = classify_transition(before, after)
    assert transition.was_started
    assert transition.was_finished


def test_new_build_with_start_time_counts_as_started():
    after = BuildSnapshot(id=1, number="1", started_at=STARTED_AT)
    transition = classify_transition(EMPTY_SNAPSHOT, after)
    assert transition.was_started
    assert {"id", "number", "started_at"} <= transition.changed_fields


def test_log_append_flag():
    snapshot = BuildSnapshot(id=1, started_at=STARTED_AT)
    transition = classify_transition(snapshot, snapshot, LogAppend("$ rake\n", "m1"))
    assert transition.log_appended
    assert transition.changed_fields == frozenset()


def test_empty_log_append_is_not_flagged():
    snapshot = BuildSnapshot(id=1)
    assert not classify_transition(snapshot, snapshot, LogAppend("")).log_appended
    assert not classify_transition(snapshot, snapshot).log_appended


# ─── Timestamp normalization ─────────────────────────────────────

def test_naive_and_aware_timestamps_compare_equal():
    naive = BuildSnapshot(id=1, started_at=datetime(2011, 1, 1, 12, 0))
    aware = BuildSnapshot(id=1, started_at=STARTED_AT)
    assert changed_fields(naive, aware) == frozenset()


def test_as_utc_converts_offsets():
    from datetime import timedelta

    plus_two = timezone(timedelta(hours=2))
    value = datetime(2011, 1, 1, 14, 0, tzinfo=plus_two)
    assert as_utc(value) == STARTED_AT
    assert as_utc(value).tzinfo == timezone.utc
    assert as_utc(None) is None
