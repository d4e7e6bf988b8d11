"""Place surface boxes on a carved box and render the cube soup.

Demonstrates: SDFObject builders, generate_lod_boxes, generate_box_mesh,
              generate_texture, sample_levelset
Output:       examples/place_boxes.png

Scene:
    Box half-extents (1, 1, 1), minus a sphere of radius 1.2 at the origin,
    minus a small sphere pushed into one corner.  The big sphere removes the
    face centres, leaving eight corner chunks.
"""
import logging
import os
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np
from leansdf import Box, SDFElement, SDFObject, Sphere, sample_levelset
from leansdf.grid import flatten_centers
from leansdf.logging_config import setup_logging

_RES      = 8
_MAX_LODS = 3
_MIN_BOX  = 0.02
_OUT      = os.path.join(os.path.dirname(__file__), "place_boxes.png")


def build_scene() -> SDFObject:
    return (
        SDFObject()
        .union(SDFElement().with_primitive(Box((1.0, 1.0, 1.0))))
        .subtract(SDFElement().with_primitive(Sphere(1.2)))
        .subtract(SDFElement().with_primitive(Sphere(0.35)).with_translation((1.0, 1.0, 1.0)))
    )


def _render_png(mesh, phi, bounds, out_path, title=""):
    try:
        import matplotlib.pyplot as plt
        from mpl_toolkits.mplot3d.art3d import Poly3DCollection
        from skimage import measure
    except ImportError:
        print("  scikit-image / matplotlib not available — skipping PNG")
        return

    lo, hi = float(bounds.min.min()), float(bounds.max.max())
    fig = plt.figure(figsize=(10, 5), facecolor="#111")

    # --- cube soup ---
    ax = fig.add_subplot(121, projection="3d")
    tris = mesh.positions[mesh.indices.reshape(-1, 3)]
    normals = mesh.normals[mesh.indices.reshape(-1, 3)[:, 0]]
    shade = 0.3 + 0.7 * np.clip(normals @ np.array([0.577, 0.577, 0.577]), 0, 1)
    fc = np.column_stack([shade * 0.3, shade * 0.6, shade * 1.0, np.ones_like(shade)])
    ax.add_collection3d(Poly3DCollection(tris, facecolors=fc, edgecolors="none"))
    ax.set_title(f"{len(tris) // 12} boxes", color="white", fontsize=10)

    # --- marching-cubes reference ---
    ax2 = fig.add_subplot(122, projection="3d")
    if phi.min() < 0 < phi.max():
        spacing = bounds.largest_extent / phi.shape[0]
        verts, faces, _, _ = measure.marching_cubes(phi, level=0, spacing=(spacing,) * 3)
        verts += bounds.min + spacing / 2.0
        ax2.add_collection3d(Poly3DCollection(verts[faces], facecolor="#c66", edgecolor="none"))
    ax2.set_title("isosurface", color="white", fontsize=10)

    for a in (ax, ax2):
        a.set_facecolor("#111"); a.set_axis_off(); a.set_box_aspect([1, 1, 1])
        a.set_xlim(lo, hi); a.set_ylim(lo, hi); a.set_zlim(lo, hi)
    fig.suptitle(title, color="white")
    plt.savefig(out_path, dpi=150, bbox_inches="tight", facecolor="#111")
    plt.close()
    print(f"  Saved: {out_path}")


def main():
    setup_logging(logging.INFO)
    print("=" * 60)
    print("PLACE BOXES: box minus sphere minus corner sphere")
    print(f"  resolution {_RES}, up to {_MAX_LODS} LODs, min box {_MIN_BOX}")
    print("=" * 60)

    sdf = build_scene()
    bounds = sdf.get_bounds()
    print(f"\nBounds: {bounds.min} .. {bounds.max}")

    lods = sdf.generate_lod_boxes(_RES, _MAX_LODS, _MIN_BOX)
    for i, level in enumerate(lods):
        print(f"  LOD {i}: edge {level.cell_size:.4f}  groups {len(level.groups):5d}  boxes {level.box_count:6d}")

    mesh = sdf.generate_box_mesh(_RES, _MAX_LODS, _MIN_BOX)
    print(f"\nMesh: {mesh.vertex_count} vertices, {mesh.triangle_count} triangles")

    # per-box occupancy of the first deepest box
    centers = flatten_centers(lods[-1])
    if len(centers):
        half = lods[-1].cell_size / 2.0
        tex = sdf.generate_texture(8, (centers[0] - half, centers[0] + half))
        print(f"Texture of box 0: {sum(tex)} / {len(tex)} cells on the surface")

    phi = sample_levelset(sdf, bounds, 48)
    _render_png(mesh, phi, bounds, _OUT, "leansdf: LOD surface boxes")


if __name__ == "__main__":
    main()
