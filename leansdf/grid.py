"""Uniform-grid surface search, LOD refinement and occupancy textures.

Every routine here lays the same cubic grid over a bounds: the cell edge is
the largest extent of the bounds divided by *resolution* (identical on all
three axes, so the grid may overhang the shorter axes), and cell ``i`` on an
axis is centred at ``min + i * edge + edge / 2``.  Cells are visited x outer,
y middle, z inner.

A cell is *surface-adjacent* when the field at its centre satisfies
``-edge <= value <= edge``.  This is looser than half the cell diagonal and
over-selects on purpose; refinement relies on never dropping a cell that
might contain the surface.
"""

from __future__ import annotations

import logging
import numbers
import os
from typing import TYPE_CHECKING, List, NamedTuple, Tuple

import numpy as np
import numpy.typing as npt

from .operators import Bounds

if TYPE_CHECKING:
    from .geometry import SDFObject

logger = logging.getLogger(__name__)

_Array = npt.NDArray[np.floating]


class LODLevel(NamedTuple):
    """One refinement level.

    ``groups[i]`` holds the ``(n, 3)`` surface-cell centres found inside the
    i-th parent cell of the previous level (level 0 has a single group).
    """

    cell_size: float
    groups: List[_Array]

    @property
    def box_count(self) -> int:
        return sum(len(g) for g in self.groups)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def check_count(name: str, value: int, minimum: int = 0) -> int:
    """Return *value* as an ``int``, or raise ``ValueError``.

    Booleans are rejected even though they are integers.
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise ValueError(f"{name} must be at least {minimum}, got {value}")
    return int(value)


def _check_resolution(resolution: int) -> int:
    return check_count("resolution", resolution, 1)


def _as_bounds(bounds) -> Bounds:
    if isinstance(bounds, Bounds):
        return bounds
    lo, hi = bounds
    return Bounds.of(lo, hi)


def _cell_edge(resolution: int, bounds: Bounds) -> float:
    return bounds.largest_extent / resolution


def _cell_centers(resolution: int, bounds: Bounds, edge: float) -> _Array:
    """All cell centres as an ``(resolution**3, 3)`` array in x/y/z order."""
    steps = np.arange(resolution) * edge + edge / 2.0
    xs = bounds.min[0] + steps
    ys = bounds.min[1] + steps
    zs = bounds.min[2] + steps
    X, Y, Z = np.meshgrid(xs, ys, zs, indexing="ij")
    return np.stack([X, Y, Z], axis=-1).reshape(-1, 3)


def _surface_mask(sdf: "SDFObject", points: _Array, edge: float) -> npt.NDArray[np.bool_]:
    values = sdf.value_at_point(points)
    return (values <= edge) & (values >= -edge)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def generate_boxes(sdf: "SDFObject", resolution: int, bounds) -> Tuple[float, _Array]:
    """Find the surface-adjacent cells of a ``resolution³`` grid over *bounds*.

    Parameters
    ----------
    sdf:
        Anything with a vectorised ``value_at_point(p)``.
    resolution:
        Number of cells along each axis; must be at least 1.
    bounds:
        :class:`Bounds` or a ``(min, max)`` pair.

    Returns
    -------
    (float, numpy.ndarray)
        The cell edge and an ``(n, 3)`` array of retained cell centres.
        Bounds with no positive extent give ``(0.0, empty)``.
    """
    resolution = _check_resolution(resolution)
    bounds = _as_bounds(bounds)
    edge = _cell_edge(resolution, bounds)
    if not edge > 0.0:
        return 0.0, np.empty((0, 3))

    points = _cell_centers(resolution, bounds, edge)
    boxes = points[_surface_mask(sdf, points, edge)]
    if logger.isEnabledFor(logging.DEBUG):
        for b in boxes:
            logger.debug("Surface box @ %s size %g", b, edge)
    return edge, boxes


def generate_texture(sdf: "SDFObject", resolution: int, bounds) -> bytes:
    """Occupancy texture of a ``resolution³`` grid over *bounds*.

    One byte per cell, ``1`` for surface-adjacent cells and ``0`` otherwise,
    x outer / y middle / z inner.  The length is always ``resolution**3``.
    """
    resolution = _check_resolution(resolution)
    bounds = _as_bounds(bounds)
    edge = _cell_edge(resolution, bounds)
    if not edge > 0.0:
        return bytes(resolution ** 3)

    points = _cell_centers(resolution, bounds, edge)
    return _surface_mask(sdf, points, edge).astype(np.uint8).tobytes()


def generate_lod_boxes(
    sdf: "SDFObject",
    resolution: int,
    max_lods: int,
    min_box_size: float,
) -> List[LODLevel]:
    """Adaptively refine the surface cells of *sdf*, coarse to fine.

    Level 0 searches the object's global bounds.  Each further level
    re-runs the grid search inside every surface cell of the previous level,
    producing one group per parent cell, so its edge is the previous edge
    divided by *resolution*.

    Refinement stops once *max_lods* levels exist, or when the next edge
    would fall below *min_box_size*.
    """
    resolution = _check_resolution(resolution)
    max_lods = check_count("max_lods", max_lods)
    if min_box_size < 0:
        raise ValueError(f"min_box_size must be non-negative, got {min_box_size}")

    lods: List[LODLevel] = []
    while len(lods) < max_lods:
        logger.info("Getting box data for LOD %d, max is %d", len(lods), max_lods)
        if not lods:
            edge, boxes = generate_boxes(sdf, resolution, sdf.get_bounds())
            lods.append(LODLevel(edge, [boxes]))
            continue

        last = lods[-1]
        new_size = last.cell_size / resolution
        if new_size < min_box_size:
            logger.debug("Next LOD edge %g is below %g, stopping", new_size, min_box_size)
            break

        half = last.cell_size / 2.0
        groups: List[_Array] = []
        for current in flatten_centers(last):
            edge, boxes = generate_boxes(sdf, resolution, Bounds(current - half, current + half))
            new_size = edge
            groups.append(boxes)
        lods.append(LODLevel(new_size, groups))

    return lods


def flatten_centers(level: LODLevel) -> _Array:
    """All centres of *level* as a single ``(n, 3)`` array, group order kept."""
    if not level.groups:
        return np.empty((0, 3))
    return np.concatenate(level.groups, axis=0)


def sample_levelset(sdf: "SDFObject", bounds, resolution: int) -> _Array:
    """Sample *sdf* at every cell centre of the ``resolution³`` grid.

    Returns
    -------
    numpy.ndarray
        Shape ``(resolution, resolution, resolution)``, indexed ``[x, y, z]``.

    Raises
    ------
    ValueError
        If *bounds* has no positive extent (empty or fully inverted).
    """
    resolution = _check_resolution(resolution)
    bounds = _as_bounds(bounds)
    edge = _cell_edge(resolution, bounds)
    if edge <= 0.0:
        raise ValueError(f"cannot sample bounds {bounds.min} .. {bounds.max} with no extent")
    points = _cell_centers(resolution, bounds, edge)
    return np.asarray(sdf.value_at_point(points)).reshape(resolution, resolution, resolution)


def save_npy(path: str, texture: bytes, resolution: int) -> None:
    """Save an occupancy *texture* as a ``(res, res, res)`` uint8 array."""
    grid = np.frombuffer(texture, dtype=np.uint8).reshape(resolution, resolution, resolution)
    out_dir = os.path.dirname(path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    np.save(path, grid)
