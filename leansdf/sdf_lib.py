"""Core SDF math kernels (numpy only).

This module provides:

* **Type alias**: :data:`_F`
* **Vector helpers**: :func:`vec3`, :func:`length`, :func:`as_points`
* **3-D primitive SDFs**: :func:`sdSphere`, :func:`sdBox`
* **Boolean operators on distances**: :func:`opUnion`, :func:`opSubtraction`,
  :func:`opIntersection`
* **Boolean operators on bounds**: :func:`bbUnion`, :func:`bbSubtraction`,
  :func:`bbIntersection`

All distance functions accept and return ``numpy.ndarray`` objects and
support broadcasting over arbitrary leading batch dimensions.  A "point
array" *p* has shape ``(..., 3)``; scalar SDF results have shape ``(...,)``.

Formulas are adapted from Inigo Quilez's distance function reference:
https://iquilezles.org/articles/distfunctions/
"""

from __future__ import annotations

from typing import Tuple

import numpy as np
import numpy.typing as npt

# ---------------------------------------------------------------------------
# Type alias
# ---------------------------------------------------------------------------
_F = npt.NDArray[np.floating]
_Corners = Tuple[_F, _F]

__all__ = [
    "_F",
    "vec3", "length", "as_points",
    "sdSphere", "sdBox",
    "opUnion", "opSubtraction", "opIntersection",
    "bbUnion", "bbSubtraction", "bbIntersection",
]


# ===========================================================================
# Vector helpers
# ===========================================================================

def vec3(x, y, z) -> _F:
    """Stack *x*, *y*, *z* into a ``(..., 3)`` float array."""
    x, y, z = np.broadcast_arrays(
        np.asarray(x, dtype=float), np.asarray(y, dtype=float), np.asarray(z, dtype=float)
    )
    return np.stack([x, y, z], axis=-1)


def length(v: _F) -> _F:
    """Euclidean length along the last axis."""
    return np.linalg.norm(v, axis=-1)


def as_points(p) -> _F:
    """Coerce *p* to a float array whose last axis has size 3."""
    p = np.asarray(p, dtype=float)
    if p.shape[-1:] != (3,):
        raise ValueError(f"expected points with a trailing axis of 3, got shape {p.shape}")
    return p


# ===========================================================================
# 3-D primitive SDFs
# ===========================================================================

def sdSphere(p: _F, s: float) -> _F:
    """Sphere of radius *s* centred at the origin."""
    return length(p) - s


def sdBox(p: _F, b: _F) -> _F:
    """Axis-aligned box with half-extents *b* ``(bx, by, bz)``."""
    q = np.abs(p) - b
    return length(np.maximum(q, 0.0)) + np.minimum(np.max(q, axis=-1), 0.0)


# ===========================================================================
# Boolean operators on distances
# ===========================================================================

def opUnion(d1: _F, d2: _F) -> _F:
    """Union of two SDFs: ``min(d1, d2)``."""
    return np.minimum(d1, d2)


def opSubtraction(d1: _F, d2: _F) -> _F:
    """Subtract *d1* from *d2*: ``max(-d1, d2)``."""
    return np.maximum(-d1, d2)


def opIntersection(d1: _F, d2: _F) -> _F:
    """Intersection of two SDFs: ``max(d1, d2)``."""
    return np.maximum(d1, d2)


# ===========================================================================
# Boolean operators on axis-aligned bounds
# ===========================================================================
#
# Bounds are passed as ``(min_corner, max_corner)`` pairs of ``(3,)`` arrays.

def bbUnion(a: _Corners, b: _Corners) -> _Corners:
    """Smallest box containing both *a* and *b*."""
    return np.minimum(a[0], b[0]), np.maximum(a[1], b[1])


def bbSubtraction(a: _Corners, b: _Corners) -> _Corners:
    """Removing *b* from *a* never grows *a*'s envelope."""
    return np.array(a[0], dtype=float), np.array(a[1], dtype=float)


def bbIntersection(a: _Corners, b: _Corners) -> _Corners:
    """Overlap of *a* and *b*; inverted on any axis where they are disjoint."""
    return np.maximum(a[0], b[0]), np.minimum(a[1], b[1])
