"""Primitive shapes with closed-form signed distance functions."""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np
import numpy.typing as npt

from . import sdf_lib as sdf
from .operators import Bounds

_Array = npt.NDArray[np.floating]


class Sphere:
    """Sphere centred at origin with given *radius*."""

    __slots__ = ("radius",)

    def __init__(self, radius: float = 1.0) -> None:
        self.radius = float(radius)

    def value_at_point(self, p) -> _Array:
        """Signed distance at *p* (shape ``(3,)`` or ``(..., 3)``)."""
        return sdf.sdSphere(sdf.as_points(p), self.radius)

    def bounds(self) -> Bounds:
        r = np.full(3, self.radius)
        return Bounds(-r, r)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Sphere) and other.radius == self.radius

    def __hash__(self) -> int:
        return hash(("sphere", self.radius))

    def __repr__(self) -> str:
        return f"Sphere(radius={self.radius})"


class Box:
    """Axis-aligned box with *half_extents* ``(hx, hy, hz)`` centred at origin."""

    __slots__ = ("half_extents",)

    def __init__(self, half_extents: Sequence[float] = (1.0, 1.0, 1.0)) -> None:
        b = np.array(half_extents, dtype=float)
        if b.shape != (3,):
            raise ValueError(f"half_extents must have 3 components, got {b.shape}")
        b.setflags(write=False)
        self.half_extents = b

    def value_at_point(self, p) -> _Array:
        """Signed distance at *p* (shape ``(3,)`` or ``(..., 3)``)."""
        return sdf.sdBox(sdf.as_points(p), self.half_extents)

    def bounds(self) -> Bounds:
        return Bounds(-self.half_extents, self.half_extents.copy())

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Box) and bool(np.array_equal(other.half_extents, self.half_extents))

    def __hash__(self) -> int:
        return hash(("box", tuple(self.half_extents)))

    def __repr__(self) -> str:
        hx, hy, hz = self.half_extents
        return f"Box(half_extents=({hx}, {hy}, {hz}))"


Primitive = Union[Sphere, Box]
