"""Child Builds — creation parameters for the children of a matrix build.

Invariants:
    - number = "{parent.number}.{index}", index 1-based in row order
    - config = the row as a dict (later duplicate keys overwrite earlier)
    - Every other parent attribute is inherited except storage-assigned ones
"""

from collections.abc import Mapping, Sequence
from typing import Any

from buildhub.core.domain_types import MatrixRow

# Assigned by storage, never copied to children.
STORAGE_ASSIGNED_FIELDS: frozenset[str] = frozenset({"id", "created_at"})


def child_build_attrs(
    parent_attrs: Mapping[str, Any], index: int, row: MatrixRow,
) -> dict[str, Any]:
    """Build one child's attributes from the parent and one expansion row."""
    attrs = {
        key: value for key, value in parent_attrs.items()
        if key not in STORAGE_ASSIGNED_FIELDS
    }
    attrs["parent_id"] = parent_attrs.get("id")
    attrs["number"] = f"{parent_attrs['number']}.{index}"
    attrs["config"] = dict(row)
    return attrs


def matrix_children_attrs(
    parent_attrs: Mapping[str, Any], rows: Sequence[MatrixRow],
) -> list[dict[str, Any]]:
    return [
        child_build_attrs(parent_attrs, index, row)
        for index, row in enumerate(rows, start=1)
    ]
