"""Child Builds — verifies numbering, config, and attribute inheritance."""

from datetime import datetime, timezone

from buildhub.core.child_builds import child_build_attrs, matrix_children_attrs
from buildhub.core.matrix_expansion import plan_matrix


PARENT = {
    "id": 7,
    "repository_id": 3,
    "parent_id": None,
    "number": "12",
    "commit": "62aae5f70ceee39123ef",
    "message": "the commit message",
    "author_name": "Sven Fuchs",
    "author_email": "svenfuchs@artweb-design.de",
    "committer_name": "Sven Fuchs",
    "committer_email": "svenfuchs@artweb-design.de",
    "committed_at": datetime(2011, 1, 1, tzinfo=timezone.utc),
    "status": None,
    "log": "",
    "config": {"rvm": ["1.9.3", "2.0.0"], "script": "rake"},
    "created_at": datetime(2011, 1, 1, 0, 1, tzinfo=timezone.utc),
}


def test_child_number_and_parent():
    attrs = child_build_attrs(PARENT, 2, [("rvm", "2.0.0")])
    assert attrs["number"] == "12.2"
    assert attrs["parent_id"] == 7


def test_child_config_is_the_row():
    attrs = child_build_attrs(PARENT, 1, [("rvm", "1.9.3"), ("env", "FOO=1")])
    assert attrs["config"] == {"rvm": "1.9.3", "env": "FOO=1"}


def test_later_duplicate_keys_win():
    attrs = child_build_attrs(PARENT, 1, [("env", "A=1"), ("env", "B=2")])
    assert attrs["config"] == {"env": "B=2"}


def test_child_inherits_commit_metadata():
    attrs = child_build_attrs(PARENT, 1, [("rvm", "1.9.3")])
    assert attrs["repository_id"] == 3
    assert attrs["commit"] == PARENT["commit"]
    assert attrs["author_email"] == PARENT["author_email"]
    assert attrs["committed_at"] == PARENT["committed_at"]


def test_storage_assigned_fields_are_not_copied():
    attrs = child_build_attrs(PARENT, 1, [("rvm", "1.9.3")])
    assert "id" not in attrs
    assert "created_at" not in attrs


def test_children_numbers_are_contiguous_and_one_based():
    rows = plan_matrix({"rvm": ["1.8.7", "1.9.2", "1.9.3"], "env": "FOO=1"})
    children = matrix_children_attrs(PARENT, rows)
    assert [child["number"] for child in children] == ["12.1", "12.2", "12.3"]
    assert [child["config"]["rvm"] for child in children] == ["1.8.7", "1.9.2", "1.9.3"]
