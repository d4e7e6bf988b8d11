"""Boolean operator algebra for signed distances and axis-aligned bounds."""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple

import numpy as np
import numpy.typing as npt

from . import sdf_lib as sdf

_Array = npt.NDArray[np.floating]


class Bounds(NamedTuple):
    """Axis-aligned bounds ``(min, max)`` as two ``(3,)`` float arrays.

    A bounds produced by :attr:`Operator.INTERSECTION` may be inverted
    (``min > max``) on any axis where the operands do not overlap; that is
    the encoding of "no volume".
    """

    min: _Array
    max: _Array

    @classmethod
    def of(cls, lo, hi) -> "Bounds":
        return cls(np.array(lo, dtype=float), np.array(hi, dtype=float))

    @classmethod
    def empty(cls) -> "Bounds":
        """The canonical zero box ``(0, 0, 0)-(0, 0, 0)``."""
        return cls(np.zeros(3), np.zeros(3))

    @property
    def extent(self) -> _Array:
        return self.max - self.min

    @property
    def largest_extent(self) -> float:
        return float(np.max(self.extent))

    @property
    def center(self) -> _Array:
        return (self.min + self.max) / 2.0

    @property
    def is_inverted(self) -> bool:
        return bool(np.any(self.min > self.max))

    def corners(self) -> _Array:
        """All eight corners as an ``(8, 3)`` array."""
        lo, hi = self.min, self.max
        return np.array([
            [x, y, z]
            for x in (lo[0], hi[0])
            for y in (lo[1], hi[1])
            for z in (lo[2], hi[2])
        ], dtype=float)


class Operator(Enum):
    """How an element merges with everything evaluated before it."""

    #: Hard union: ``min(a, b)``.
    UNION = "union"
    #: Hard subtraction, removing the right operand from the left: ``max(a, -b)``.
    SUBTRACTION = "subtraction"
    #: Hard intersection: ``max(a, b)``.
    INTERSECTION = "intersection"

    def apply(self, left, right):
        return combine_value(self, left, right)

    def apply_bounds(self, left: Bounds, right: Bounds) -> Bounds:
        return combine_bounds(self, left, right)


def combine_value(op: Operator, a, b):
    """Combine the accumulated distance *a* with a new distance *b*."""
    if op is Operator.UNION:
        return sdf.opUnion(a, b)
    if op is Operator.SUBTRACTION:
        return sdf.opSubtraction(b, a)
    if op is Operator.INTERSECTION:
        return sdf.opIntersection(a, b)
    raise ValueError(f"unknown operator {op!r}")


def combine_bounds(op: Operator, a: Bounds, b: Bounds) -> Bounds:
    """Combine the accumulated bounds *a* with a new element's bounds *b*."""
    if op is Operator.UNION:
        return Bounds(*sdf.bbUnion(a, b))
    if op is Operator.SUBTRACTION:
        return Bounds(*sdf.bbSubtraction(a, b))
    if op is Operator.INTERSECTION:
        return Bounds(*sdf.bbIntersection(a, b))
    raise ValueError(f"unknown operator {op!r}")
