"""Matrix Expansion — turns padded axes into one assignment row per child build.

Invariants:
    - Input axes are padded to equal length (see matrix_axes.pad_axis)
    - Output has exactly `width` rows; row i holds the i-th value of every axis
    - Key order within a row follows axis order
    - Empty axis list -> one empty row; unequal axis lengths -> ValueError

Design Decisions:
    - Recursive walk consuming one axis per step: each step flattens exactly one
      level, so list-valued cells (e.g. env: ["A=1", "B=2"]) stay single values
"""

from collections.abc import Mapping, Sequence
from typing import Any

from buildhub.core.domain_types import AxisValue, MatrixRow
from buildhub.core.matrix_axes import DEFAULT_AXIS_KEYS, extract_matrix_axes


def expand_matrix(axes: Sequence[Sequence[AxisValue]]) -> list[MatrixRow]:
    """Expand padded axes into rows of (key, value) pairs."""
    if not axes:
        return [[]]

    width = len(axes[0])
    if any(len(axis) != width for axis in axes):
        raise ValueError(
            "Matrix axes must be padded to equal length: "
            f"{[len(axis) for axis in axes]}"
        )
    return _walk_axes(list(axes), [[] for _ in range(width)])


def _walk_axes(
    remaining: list[Sequence[AxisValue]], partial_rows: list[MatrixRow],
) -> list[MatrixRow]:
    if not remaining:
        return partial_rows
    head, rest = remaining[0], remaining[1:]
    extended = [row + [cell] for row, cell in zip(partial_rows, head)]
    return _walk_axes(rest, extended)


def plan_matrix(
    config: Mapping[str, Any] | None,
    axis_keys: Sequence[str] = DEFAULT_AXIS_KEYS,
) -> list[MatrixRow]:
    """Rows a config expands into; [] when it is not a matrix."""
    axes = extract_matrix_axes(config, axis_keys)
    if not axes.is_matrix:
        return []
    return expand_matrix(axes.padded())
