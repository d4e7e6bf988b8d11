"""Cube-soup meshes built from LOD surface boxes.

Every box becomes an independent cube of 24 vertices (4 per face, flat
normals, per-face UVs in ``[0, 1]²``) and 36 triangle-list indices.  Faces
are emitted in the order +Z, -Z, +X, -X, +Y, -Y and no vertices are shared
between cubes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Tuple

import numpy as np
import numpy.typing as npt

from .grid import flatten_centers, generate_lod_boxes

if TYPE_CHECKING:
    from .geometry import SDFObject

logger = logging.getLogger(__name__)

_Array = npt.NDArray[np.floating]

VERTICES_PER_BOX = 24
INDICES_PER_BOX = 36

# ---------------------------------------------------------------------------
# Cube template: corner signs, normals and UVs for the 24 vertices
# ---------------------------------------------------------------------------
_CORNERS = np.array([
    # +Z
    [-1, -1, 1], [1, -1, 1], [1, 1, 1], [-1, 1, 1],
    # -Z
    [-1, 1, -1], [1, 1, -1], [1, -1, -1], [-1, -1, -1],
    # +X
    [1, -1, -1], [1, 1, -1], [1, 1, 1], [1, -1, 1],
    # -X
    [-1, -1, 1], [-1, 1, 1], [-1, 1, -1], [-1, -1, -1],
    # +Y
    [1, 1, -1], [-1, 1, -1], [-1, 1, 1], [1, 1, 1],
    # -Y
    [1, -1, 1], [-1, -1, 1], [-1, -1, -1], [1, -1, -1],
], dtype=np.float32)

_FACE_NORMALS = np.array([
    [0, 0, 1], [0, 0, -1], [1, 0, 0], [-1, 0, 0], [0, 1, 0], [0, -1, 0],
], dtype=np.float32)
_NORMALS = np.repeat(_FACE_NORMALS, 4, axis=0)

_UV_A = [[0, 0], [1, 0], [1, 1], [0, 1]]
_UV_B = [[1, 0], [0, 0], [0, 1], [1, 1]]
_UVS = np.array(_UV_A + _UV_B + _UV_A + _UV_B + _UV_B + _UV_A, dtype=np.float32)

_INDICES = (
    np.arange(6, dtype=np.uint32)[:, None] * 4
    + np.array([0, 1, 2, 2, 3, 0], dtype=np.uint32)
).reshape(-1)


@dataclass(frozen=True)
class BoxMesh:
    """Triangle-list mesh with parallel per-vertex attribute arrays.

    ``positions``/``normals`` are ``float32 (n, 3)``, ``uvs`` is
    ``float32 (n, 2)`` and ``indices`` is ``uint32 (m,)``.
    """

    positions: npt.NDArray[np.float32]
    normals: npt.NDArray[np.float32]
    uvs: npt.NDArray[np.float32]
    indices: npt.NDArray[np.uint32]

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    def vertex_bytes(self) -> bytes:
        """Little-endian float32 positions, then normals, then UVs."""
        return b"".join(
            np.ascontiguousarray(a, dtype="<f4").tobytes()
            for a in (self.positions, self.normals, self.uvs)
        )

    def index_bytes(self) -> bytes:
        """Little-endian uint32 indices."""
        return np.ascontiguousarray(self.indices, dtype="<u4").tobytes()


def build_box(
    position, size: float, start_index: int
) -> Tuple[int, _Array, _Array, _Array, npt.NDArray[np.uint32]]:
    """Vertices and indices of one cube of edge *size* centred at *position*.

    Returns ``(next_index, positions, normals, uvs, indices)`` where the
    indices are offset by *start_index*.
    """
    logger.debug("Building box @ %s %g", position, size)
    center = np.asarray(position, dtype=np.float32)
    half = np.float32(size / 2.0)
    positions = center + _CORNERS * half
    indices = _INDICES + np.uint32(start_index)
    next_index = start_index + VERTICES_PER_BOX
    return next_index, positions, _NORMALS.copy(), _UVS.copy(), indices


def boxes_to_mesh(size: float, boxes) -> BoxMesh:
    """One combined cube-soup mesh for every centre in *boxes*."""
    centers = np.asarray(boxes, dtype=np.float32).reshape(-1, 3)
    n = len(centers)
    half = np.float32(size / 2.0)

    positions = (centers[:, None, :] + _CORNERS[None, :, :] * half).reshape(-1, 3)
    normals = np.tile(_NORMALS, (n, 1))
    uvs = np.tile(_UVS, (n, 1))
    offsets = np.arange(n, dtype=np.uint32) * np.uint32(VERTICES_PER_BOX)
    indices = (offsets[:, None] + _INDICES[None, :]).reshape(-1)
    return BoxMesh(positions, normals, uvs, indices.astype(np.uint32))


def unit_cube_mesh() -> BoxMesh:
    """A 1x1x1 cube at the origin, used when there is nothing to mesh."""
    _, positions, normals, uvs, indices = build_box((0.0, 0.0, 0.0), 1.0, 0)
    return BoxMesh(positions, normals, uvs, indices)


def generate_box_mesh(
    sdf: "SDFObject",
    resolution: int,
    target_lod: int,
    min_box_size: float,
) -> BoxMesh:
    """Mesh the deepest LOD level of *sdf* as a cube soup.

    Falls back to :func:`unit_cube_mesh` when no level is produced or the
    deepest level has no boxes, so callers always get a drawable mesh.
    """
    lods = generate_lod_boxes(sdf, resolution, target_lod, min_box_size)
    if not lods or lods[-1].box_count == 0:
        logger.info("No surface boxes at the deepest LOD, using the unit cube")
        return unit_cube_mesh()

    last = lods[-1]
    return boxes_to_mesh(last.cell_size, flatten_centers(last))
