"""
leansdf — SDF scenes to surface boxes, cube meshes and occupancy textures
=========================================================================

A small library for composing signed distance fields from primitives and
boolean operators, then locating their surface with an adaptive,
level-of-detail grid search.

Implemented features
--------------------
- Primitive shapes: Sphere, Box
- Per-element transforms: translation, quaternion rotation, uniform scale
- Operators: Union, Subtraction, Intersection (on distances and on bounds)
- Surface search: :func:`generate_boxes`, :func:`generate_lod_boxes`
- Occupancy textures: :func:`generate_texture`
- Cube-soup meshes: :func:`generate_box_mesh`
- Host boundary: :func:`prepare_asset` / :class:`RetryNextUpdate`

Quick start
-----------
::

    from leansdf import SDFElement, SDFObject, Box, Sphere

    shape = (
        SDFObject()
        .with_element(SDFElement().with_primitive(Box((1.0, 1.0, 1.0))))
        .subtract(SDFElement().with_primitive(Sphere(1.2)))
    )

    levels = shape.generate_lod_boxes(resolution=8, max_lods=3, min_box_size=0.05)
    mesh   = shape.generate_box_mesh(resolution=8, target_lod=3, min_box_size=0.05)
"""

from .operators import Bounds, Operator, combine_bounds, combine_value
from .primitives import Box, Primitive, Sphere
from .transform import Transform, quat_from_axis_angle, quat_from_euler
from .geometry import SDFElement, SDFObject
from .grid import (
    LODLevel,
    flatten_centers,
    generate_boxes,
    generate_lod_boxes,
    generate_texture,
    sample_levelset,
    save_npy,
)
from .mesh import BoxMesh, boxes_to_mesh, build_box, generate_box_mesh, unit_cube_mesh
from .config import LODSettings
from .render_asset import RetryNextUpdate, SDFInstanceData, SDFRenderAsset, prepare_asset

__version__ = "0.1.0"

__all__ = [
    # Operators and bounds
    "Bounds",
    "Operator",
    "combine_bounds",
    "combine_value",

    # Primitives
    "Box",
    "Primitive",
    "Sphere",

    # Transforms
    "Transform",
    "quat_from_axis_angle",
    "quat_from_euler",

    # Elements and objects
    "SDFElement",
    "SDFObject",

    # Grid search
    "LODLevel",
    "flatten_centers",
    "generate_boxes",
    "generate_lod_boxes",
    "generate_texture",
    "sample_levelset",
    "save_npy",

    # Meshes
    "BoxMesh",
    "boxes_to_mesh",
    "build_box",
    "generate_box_mesh",
    "unit_cube_mesh",

    # Host boundary
    "LODSettings",
    "RetryNextUpdate",
    "SDFInstanceData",
    "SDFRenderAsset",
    "prepare_asset",
]
