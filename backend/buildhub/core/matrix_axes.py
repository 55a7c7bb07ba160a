"""Matrix Axes — detects which configuration keys vary and how wide the matrix is.

Invariants:
    - Only keys from the axis vocabulary count, in vocabulary order
    - width = longest list among axis values; scalars count as length 1
    - width <= 1 means "not a matrix" — never an error
    - padded() returns equal-length axes; short lists repeat their last value

Design Decisions:
    - MatrixAxes is a frozen value computed once per save and passed along,
      instead of being memoized on the build instance
    - Vocabulary is a parameter (settings.matrix_axis_keys) with a default
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from buildhub.core.domain_types import AxisValue

DEFAULT_AXIS_KEYS: tuple[str, ...] = ("rvm", "gemfile", "env")


@dataclass(frozen=True)
class MatrixAxes:
    """Axis keys present in a config, their raw values, and the matrix width."""
    keys: tuple[str, ...]
    values: tuple[Any, ...]
    width: int

    @property
    def is_matrix(self) -> bool:
        return self.width > 1

    def padded(self) -> list[list[AxisValue]]:
        """Axes as (key, value) lists of exactly `width` entries.

        Empty when width <= 1: a non-matrix config has nothing to expand.
        """
        if not self.is_matrix:
            return []
        return [
            [(key, value) for value in pad_axis(raw, self.width)]
            for key, raw in zip(self.keys, self.values)
        ]


NO_AXES = MatrixAxes(keys=(), values=(), width=1)


def pad_axis(raw: Any, width: int) -> list[Any]:
    """Wrap scalars, then repeat the last value until `width` is reached."""
    values = list(raw) if isinstance(raw, list) else [raw]
    if len(values) < width:
        filler = values[-1] if values else None
        values += [filler] * (width - len(values))
    return values


def extract_matrix_axes(
    config: Mapping[str, Any] | None,
    axis_keys: Sequence[str] = DEFAULT_AXIS_KEYS,
) -> MatrixAxes:
    """Find the recognized axis keys in `config` and compute the width."""
    if not config:
        return NO_AXES

    keys = tuple(key for key in axis_keys if key in config)
    values = tuple(config[key] for key in keys)
    list_lengths = [len(value) for value in values if isinstance(value, list)]
    width = max([1, *list_lengths])
    return MatrixAxes(keys=keys, values=values, width=width)


def is_matrix_build(parent_id: int | None, axes: MatrixAxes) -> bool:
    """A matrix build is a top-level build whose axes are wider than one."""
    return parent_id is None and axes.is_matrix
