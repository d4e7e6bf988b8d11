"""Render-asset preparation for a host renderer.

The host asks for an object's instance data once the object is available.
:func:`prepare_asset` answers with an :class:`SDFRenderAsset` (one instance
per surface box of the deepest LOD level, each carrying its own occupancy
texture) or with :class:`RetryNextUpdate` when there is nothing to prepare
yet.  ``RetryNextUpdate`` is a result, not an error: the host keeps the
source and asks again on its next update.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Union

import numpy as np
import numpy.typing as npt

from .config import LODSettings
from .geometry import SDFObject
from .grid import flatten_centers, generate_lod_boxes, generate_texture
from .operators import Bounds

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SDFInstanceData:
    """One surface box: its centre, edge length and occupancy texture."""

    position: npt.NDArray[np.floating]
    size: float
    texture: bytes = field(repr=False)


@dataclass(frozen=True)
class SDFRenderAsset:
    cell_size: float
    instances: List[SDFInstanceData]


@dataclass(frozen=True)
class RetryNextUpdate:
    """The asset cannot be prepared yet; retry with the same *source*."""

    source: Optional[SDFObject]


def prepare_asset(
    sdf: Optional[SDFObject],
    settings: Optional[LODSettings] = None,
) -> Union[SDFRenderAsset, RetryNextUpdate]:
    """Build per-instance render data for *sdf*.

    Parameters
    ----------
    sdf:
        The object to prepare, or ``None`` when it has not been loaded yet.
    settings:
        LOD and texture parameters; :class:`LODSettings` defaults otherwise.
    """
    if sdf is None:
        logger.info("SDF asset not loaded yet, retrying next update")
        return RetryNextUpdate(sdf)

    settings = settings or LODSettings()
    logger.info("Preparing SDF Asset")
    lods = generate_lod_boxes(sdf, settings.resolution, settings.max_lods, settings.min_box_size)
    if not lods:
        logger.info("No LOD levels generated, retrying next update")
        return RetryNextUpdate(sdf)

    last = lods[-1]
    half = last.cell_size / 2.0
    instances = [
        SDFInstanceData(
            position=center,
            size=last.cell_size,
            texture=generate_texture(
                sdf, settings.texture_resolution, Bounds(center - half, center + half)
            ),
        )
        for center in flatten_centers(last)
    ]
    return SDFRenderAsset(last.cell_size, instances)
