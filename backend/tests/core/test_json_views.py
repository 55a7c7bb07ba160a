"""JSON Views — verifies the named field-set projections."""

from datetime import datetime, timezone

import pytest

from buildhub.core.domain_types import JsonView
from buildhub.core.errors import UnknownViewError
from buildhub.core.json_views import (
    BUILD_VIEWS,
    project_build,
    project_repository,
    resolve_view,
)

BUILD = {
    "id": 1,
    "repository_id": 2,
    "parent_id": None,
    "number": "3",
    "commit": "abc123",
    "message": "msg",
    "status": 0,
    "log": "output",
    "started_at": datetime(2011, 1, 1, 12, 0, tzinfo=timezone.utc),
    "finished_at": datetime(2011, 1, 1, 12, 5, tzinfo=timezone.utc),
    "committed_at": None,
    "committer_name": "c",
    "committer_email": "c@example.com",
    "author_name": "a",
    "author_email": "a@example.com",
    "config": {"rvm": ["1.9.3", "2.0.0"]},
}

REPOSITORY = {
    "id": 2,
    "name": "svenfuchs/minimal",
    "url": "https://github.com/svenfuchs/minimal",
    "last_build_id": 1,
    "last_build_number": "3",
    "last_build_status": 0,
    "last_build_started_at": None,
    "last_build_finished_at": datetime(2011, 1, 1, 12, 5, tzinfo=timezone.utc),
}


def test_resolve_view():
    assert resolve_view(None) is JsonView.DEFAULT
    assert resolve_view("build:started") is JsonView.STARTED
    assert resolve_view(JsonView.JOB) is JsonView.JOB


def test_unknown_view_is_rejected():
    with pytest.raises(UnknownViewError) as exc_info:
        resolve_view("build:exploded")
    assert exc_info.value.http_status == 400


def test_every_view_has_id():
    for field_names in BUILD_VIEWS.values():
        assert "id" in field_names


def test_job_view():
    assert project_build(BUILD, "job") == {
        "id": 1, "commit": "abc123", "config": {"rvm": ["1.9.3", "2.0.0"]},
    }


def test_queued_view():
    assert project_build(BUILD, "build:queued") == {"id": 1, "number": "3"}


def test_started_view_omits_status_and_log():
    json = project_build(BUILD, "build:started")
    assert "status" not in json
    assert "log" not in json
    assert json["started_at"] == "2011-01-01T12:00:00+00:00"


def test_finished_view():
    assert project_build(BUILD, "build:finished") == {
        "id": 1, "status": 0, "finished_at": "2011-01-01T12:05:00+00:00",
    }


def test_default_view_includes_log():
    json = project_build(BUILD)
    assert json["log"] == "output"
    assert "matrix" not in json


def test_matrix_children_embedded_as_started_view():
    children = [
        {**BUILD, "id": 10, "parent_id": 1, "number": "3.1", "config": {"rvm": "1.9.3"}},
        {**BUILD, "id": 11, "parent_id": 1, "number": "3.2", "config": {"rvm": "2.0.0"}},
    ]
    json = project_build(BUILD, "build:finished", matrix=children)
    assert [child["number"] for child in json["matrix"]] == ["3.1", "3.2"]
    assert all("log" not in child for child in json["matrix"])


def test_missing_fields_project_as_none():
    assert project_build({"id": 9}, "build:queued") == {"id": 9, "number": None}


def test_repository_views():
    assert project_repository(REPOSITORY, "build:log") == {"id": 2}
    finished = project_repository(REPOSITORY, "build:finished")
    assert "name" not in finished
    assert finished["last_build_finished_at"] == "2011-01-01T12:05:00+00:00"
    default = project_repository(REPOSITORY)
    assert default["name"] == "svenfuchs/minimal"


def test_build_only_views_fall_back_to_default_for_repositories():
    assert project_repository(REPOSITORY, "job") == project_repository(REPOSITORY)
