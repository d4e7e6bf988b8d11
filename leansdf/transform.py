"""Similarity transforms (translation, rotation, uniform scale).

Rotations are unit quaternions stored as ``(x, y, z, w)``.  A
:class:`Transform` computes its forward 4x4 matrix and the inverse in the
constructor and is never mutated afterwards; the ``with_*`` builders return
a new instance.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
import numpy.typing as npt

_Array = npt.NDArray[np.floating]

IDENTITY_QUAT = (0.0, 0.0, 0.0, 1.0)


# ===========================================================================
# Quaternion helpers
# ===========================================================================

def quat_normalize(q: Sequence[float]) -> _Array:
    q = np.array(q, dtype=float)
    if q.shape != (4,):
        raise ValueError(f"quaternion must have 4 components, got {q.shape}")
    n = np.linalg.norm(q)
    if n == 0.0:
        raise ValueError("cannot normalise a zero quaternion")
    return q / n


def quat_mul(a: Sequence[float], b: Sequence[float]) -> _Array:
    """Hamilton product ``a * b`` (apply *b* first, then *a*)."""
    ax, ay, az, aw = a
    bx, by, bz, bw = b
    return np.array([
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
        aw * bw - ax * bx - ay * by - az * bz,
    ])


def quat_from_axis_angle(axis: Sequence[float], angle_rad: float) -> _Array:
    """Rotation of *angle_rad* radians about *axis*."""
    axis = np.array(axis, dtype=float)
    axis = axis / np.linalg.norm(axis)
    s = np.sin(angle_rad / 2.0)
    return np.array([axis[0] * s, axis[1] * s, axis[2] * s, np.cos(angle_rad / 2.0)])


def quat_from_euler(x_rad: float, y_rad: float, z_rad: float) -> _Array:
    """Intrinsic XYZ Euler angles: ``Rx * Ry * Rz``."""
    qx = quat_from_axis_angle((1.0, 0.0, 0.0), x_rad)
    qy = quat_from_axis_angle((0.0, 1.0, 0.0), y_rad)
    qz = quat_from_axis_angle((0.0, 0.0, 1.0), z_rad)
    return quat_mul(quat_mul(qx, qy), qz)


def quat_to_matrix(q: Sequence[float]) -> _Array:
    """3x3 rotation matrix of the unit quaternion *q*."""
    x, y, z, w = q
    return np.array([
        [1.0 - 2.0 * (y * y + z * z), 2.0 * (x * y - z * w), 2.0 * (x * z + y * w)],
        [2.0 * (x * y + z * w), 1.0 - 2.0 * (x * x + z * z), 2.0 * (y * z - x * w)],
        [2.0 * (x * z - y * w), 2.0 * (y * z + x * w), 1.0 - 2.0 * (x * x + y * y)],
    ])


def transform_points(matrix: _Array, p: _Array) -> _Array:
    """Apply an affine 4x4 *matrix* to points of shape ``(..., 3)``."""
    return p @ matrix[:3, :3].T + matrix[:3, 3]


# ===========================================================================
# Transform
# ===========================================================================

class Transform:
    """Translation, rotation and uniform scale with a cached inverse.

    Parameters
    ----------
    translation:
        ``(tx, ty, tz)``.
    rotation:
        Quaternion ``(x, y, z, w)``; normalised on construction.
    scale:
        Uniform scale factor.  Only the magnitude is kept.
    """

    __slots__ = ("translation", "rotation", "scale", "matrix", "inverse")

    def __init__(
        self,
        translation: Sequence[float] = (0.0, 0.0, 0.0),
        rotation: Sequence[float] = IDENTITY_QUAT,
        scale: float = 1.0,
    ) -> None:
        self.translation = np.array(translation, dtype=float)
        if self.translation.shape != (3,):
            raise ValueError(f"translation must have 3 components, got {self.translation.shape}")
        self.rotation = quat_normalize(rotation)
        self.scale = abs(float(scale))
        if self.scale == 0.0:
            raise ValueError("scale must be non-zero")

        m = np.eye(4)
        m[:3, :3] = quat_to_matrix(self.rotation) * self.scale
        m[:3, 3] = self.translation
        self.matrix = m
        self.inverse = np.linalg.inv(m)
        for arr in (self.translation, self.rotation, self.matrix, self.inverse):
            arr.setflags(write=False)

    def with_translation(self, translation: Sequence[float]) -> "Transform":
        return Transform(translation, self.rotation, self.scale)

    def with_rotation(self, rotation: Sequence[float]) -> "Transform":
        return Transform(self.translation, rotation, self.scale)

    def with_scale(self, scale: float) -> "Transform":
        return Transform(self.translation, self.rotation, scale)

    def apply(self, p: _Array) -> _Array:
        """Local → world."""
        return transform_points(self.matrix, p)

    def apply_inverse(self, p: _Array) -> _Array:
        """World → local."""
        return transform_points(self.inverse, p)

    def __repr__(self) -> str:
        return (
            f"Transform(translation={self.translation.tolist()}, "
            f"rotation={self.rotation.tolist()}, scale={self.scale})"
        )
