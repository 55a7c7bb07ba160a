"""Push Payload — maps a commit-push event onto build creation attributes.

Invariants:
    - Only the LAST commit of the push is built
    - Committer defaults to the author when absent
    - Build number is NOT derived here (serialized counter in storage)
"""

from collections.abc import Mapping
from typing import Any
from urllib.parse import urlparse


def repository_name_from_url(url: str) -> str:
    """"https://github.com/owner/name(.git)" -> "owner/name"."""
    path = urlparse(url).path.strip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]
    return path or url


def build_attrs_from_push(data: Mapping[str, Any]) -> dict[str, Any]:
    """Commit and people fields for the build created by a push."""
    commits = data.get("commits") or []
    if not commits:
        raise ValueError("push payload contains no commits")
    commit = commits[-1]
    author = commit.get("author") or {}
    committer = commit.get("committer") or author

    return {
        "commit": commit.get("id"),
        "message": commit.get("message"),
        "committed_at": commit.get("timestamp"),
        "committer_name": committer.get("name"),
        "committer_email": committer.get("email"),
        "author_name": author.get("name"),
        "author_email": author.get("email"),
        "config": data.get("config"),
    }
