"""Tests for the surface search, LOD refinement and occupancy textures."""

import logging

import numpy as np
import numpy.testing as npt
import pytest

from leansdf import (
    Bounds,
    Box,
    SDFElement,
    SDFObject,
    Sphere,
    flatten_centers,
    generate_boxes,
    generate_lod_boxes,
    generate_texture,
    sample_levelset,
    save_npy,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _unit_box() -> SDFObject:
    return SDFObject([SDFElement().with_primitive(Box((1.0, 1.0, 1.0)))])


def _small_sphere_at(center, radius: float = 0.25) -> SDFObject:
    return SDFObject([SDFElement(Sphere(radius)).with_translation(center)])


# ===========================================================================
# generate_boxes
# ===========================================================================

class TestGenerateBoxes:
    def test_box_surface_shell(self):
        sdf = _unit_box()
        size, boxes = sdf.generate_boxes(3, sdf.get_bounds())
        npt.assert_allclose(size, 2.0 / 3.0, atol=1e-12)
        assert len(boxes) == 9 * 2 + 8

    def test_bounds_default_to_object_bounds(self):
        size, boxes = _unit_box().generate_boxes(3)
        npt.assert_allclose(size, 2.0 / 3.0, atol=1e-12)
        assert boxes.shape == (26, 3)

    def test_centre_cell_excluded(self):
        _, boxes = _unit_box().generate_boxes(3)
        assert not np.any(np.all(np.isclose(boxes, 0.0), axis=1))

    def test_cells_visited_x_outer_z_inner(self):
        _, boxes = _unit_box().generate_boxes(3)
        third = 2.0 / 3.0
        npt.assert_allclose(boxes[0], [-third, -third, -third], atol=1e-12)
        npt.assert_allclose(boxes[1], [-third, -third, 0.0], atol=1e-12)
        npt.assert_allclose(boxes[-1], [third, third, third], atol=1e-12)
        keys = [tuple(b) for b in np.round(boxes, 9)]
        assert keys == sorted(keys)

    def test_grid_uses_largest_extent_on_all_axes(self):
        sdf = SDFObject([SDFElement(Box((2.0, 0.5, 0.5)))])
        size, boxes = sdf.generate_boxes(4)
        npt.assert_allclose(size, 1.0)
        # y/z grid overhangs the box: centres at 0, 1, 2 and 3
        assert boxes[:, 1].max() > 0.5

    def test_inclusion_is_inclusive_on_cell_edge(self):
        # Centres at 0 and 1 on each axis; a point sphere at the origin reads
        # exactly 1.0 (one edge) at the three face-adjacent centres.
        sdf = SDFObject([SDFElement(Sphere(0.0))])
        size, boxes = generate_boxes(sdf, 2, Bounds.of((-0.5, -0.5, -0.5), (1.5, 1.5, 1.5)))
        assert size == 1.0
        npt.assert_array_equal(boxes, [[0, 0, 0], [0, 0, 1], [0, 1, 0], [1, 0, 0]])

    def test_empty_object_returns_no_cells(self):
        size, boxes = SDFObject().generate_boxes(4)
        assert size == 0.0
        assert boxes.shape == (0, 3)

    def test_inverted_bounds_return_no_cells(self):
        size, boxes = generate_boxes(_unit_box(), 4, Bounds.of((1, 1, 1), (0, 0, 0)))
        assert size == 0.0
        assert len(boxes) == 0

    def test_disjoint_intersection_finds_nothing(self):
        sdf = (
            SDFObject()
            .union(SDFElement().with_translation((-3, 0, 0)))
            .intersect(SDFElement().with_translation((3, 0, 0)))
        )
        assert sdf.get_bounds().is_inverted
        _, boxes = sdf.generate_boxes(4)
        assert len(boxes) == 0

    @pytest.mark.parametrize("resolution", [0, -1, 2.5, True])
    def test_invalid_resolution_rejected(self, resolution):
        with pytest.raises(ValueError):
            generate_boxes(_unit_box(), resolution, Bounds.of((-1, -1, -1), (1, 1, 1)))

    def test_accepts_plain_pair_bounds(self):
        size, boxes = generate_boxes(_unit_box(), 3, ((-1, -1, -1), (1, 1, 1)))
        assert len(boxes) == 26

    def test_repeatable(self):
        sdf = _unit_box().subtract(SDFElement(Sphere(1.2)))
        a = sdf.generate_boxes(6)
        b = sdf.generate_boxes(6)
        assert a[0] == b[0]
        npt.assert_array_equal(a[1], b[1])


# ===========================================================================
# generate_lod_boxes
# ===========================================================================

class TestGenerateLodBoxes:
    def test_two_levels_on_unit_box(self):
        result = _unit_box().generate_lod_boxes(3, 2, 0.1)
        assert len(result) == 2
        npt.assert_allclose(result[0].cell_size, 2.0 / 3.0, atol=1e-12)
        assert len(result[0].groups) == 1
        assert len(result[0].groups[0]) == 9 * 2 + 8
        npt.assert_allclose(result[1].cell_size, 2.0 / 9.0, atol=1e-12)
        assert len(result[1].groups) == 9 * 2 + 8
        assert len(result[1].groups[0]) == 19

    def test_child_shell_per_parent_kind(self):
        # corner parents keep 19 of 27 children, edge parents 15, face parents 9
        result = _unit_box().generate_lod_boxes(3, 2, 0.1)
        parents = flatten_centers(result[0])
        expected = {3: 19, 2: 15, 1: 9}
        for parent, group in zip(parents, result[1].groups):
            kind = int(np.count_nonzero(np.abs(parent) > 1e-9))
            assert len(group) == expected[kind], parent
        assert result[1].box_count == 8 * 19 + 12 * 15 + 6 * 9

    def test_one_group_per_parent(self):
        sdf = SDFObject([SDFElement(Sphere(1.0))])
        lods = sdf.generate_lod_boxes(4, 3, 0.0)
        for parent, child in zip(lods, lods[1:]):
            assert len(child.groups) == parent.box_count

    def test_children_lie_inside_their_parent(self):
        lods = _unit_box().generate_lod_boxes(3, 2, 0.1)
        parents = flatten_centers(lods[0])
        half = lods[0].cell_size / 2.0
        for parent, group in zip(parents, lods[1].groups):
            assert np.all(np.abs(group - parent) <= half + 1e-12)

    def test_stops_when_next_edge_below_min_box_size(self):
        lods = _unit_box().generate_lod_boxes(3, 4, 0.1)
        # 2/3 -> 2/9 -> 2/27 (< 0.1, not produced)
        assert len(lods) == 2

    def test_stops_at_max_lods(self):
        lods = _unit_box().generate_lod_boxes(3, 3, 0.0)
        assert len(lods) == 3
        npt.assert_allclose(lods[2].cell_size, 2.0 / 27.0, atol=1e-12)

    def test_level_zero_always_produced(self):
        lods = _unit_box().generate_lod_boxes(3, 3, 100.0)
        assert len(lods) == 1

    def test_zero_max_lods(self):
        assert _unit_box().generate_lod_boxes(3, 0, 0.1) == []

    def test_empty_object(self):
        lods = SDFObject().generate_lod_boxes(4, 3, 0.1)
        assert len(lods) == 1
        assert lods[0].cell_size == 0.0
        assert lods[0].box_count == 0

    def test_invalid_arguments(self):
        with pytest.raises(ValueError):
            generate_lod_boxes(_unit_box(), 0, 2, 0.1)
        with pytest.raises(ValueError):
            generate_lod_boxes(_unit_box(), 3, -1, 0.1)
        with pytest.raises(ValueError):
            generate_lod_boxes(_unit_box(), 3, 2, -0.1)

    def test_repeatable(self):
        a = _unit_box().generate_lod_boxes(3, 2, 0.1)
        b = _unit_box().generate_lod_boxes(3, 2, 0.1)
        assert [l.cell_size for l in a] == [l.cell_size for l in b]
        npt.assert_array_equal(flatten_centers(a[-1]), flatten_centers(b[-1]))

    def test_logs_each_level(self, caplog):
        caplog.set_level(logging.INFO, logger="leansdf.grid")
        _unit_box().generate_lod_boxes(3, 2, 0.1)
        messages = [r.getMessage() for r in caplog.records]
        assert "Getting box data for LOD 0, max is 2" in messages
        assert "Getting box data for LOD 1, max is 2" in messages


class TestFlattenCenters:
    def test_keeps_group_order(self):
        lods = _unit_box().generate_lod_boxes(3, 2, 0.1)
        flat = flatten_centers(lods[1])
        assert flat.shape == (lods[1].box_count, 3)
        npt.assert_array_equal(flat[:19], lods[1].groups[0])

    def test_empty_level(self):
        from leansdf import LODLevel

        assert flatten_centers(LODLevel(0.0, [])).shape == (0, 3)


# ===========================================================================
# generate_texture
# ===========================================================================

class TestGenerateTexture:
    def test_length_and_shell(self):
        sdf = _unit_box()
        tex = sdf.generate_texture(3, sdf.get_bounds())
        assert isinstance(tex, bytes)
        assert len(tex) == 27
        assert sum(tex) == 26
        assert tex[13] == 0  # centre cell (1, 1, 1)

    def test_only_zero_and_one(self):
        sdf = _unit_box().subtract(SDFElement(Sphere(1.2)))
        tex = sdf.generate_texture(8, sdf.get_bounds())
        assert set(tex) <= {0, 1}

    def test_x_outer_y_middle_z_inner(self):
        # Resolution 4 over [0, 4]³: cell (ix, iy, iz) is byte ix*16 + iy*4 + iz.
        sdf = _small_sphere_at([3.5, 0.5, 1.5])
        tex = generate_texture(sdf, 4, Bounds.of((0, 0, 0), (4, 4, 4)))
        on = set(np.flatnonzero(np.frombuffer(tex, dtype=np.uint8)).tolist())
        expected = {
            3 * 16 + 0 * 4 + 1,  # the cell holding the sphere
            2 * 16 + 0 * 4 + 1,  # -x neighbour
            3 * 16 + 1 * 4 + 1,  # +y neighbour
            3 * 16 + 0 * 4 + 0,  # -z neighbour
            3 * 16 + 0 * 4 + 2,  # +z neighbour
        }
        assert on == expected

    def test_matches_generate_boxes(self):
        sdf = _unit_box().subtract(SDFElement(Sphere(1.2)))
        bounds = sdf.get_bounds()
        _, boxes = sdf.generate_boxes(6, bounds)
        assert sum(sdf.generate_texture(6, bounds)) == len(boxes)

    def test_degenerate_bounds_all_zero(self):
        tex = SDFObject().generate_texture(4, Bounds.empty())
        assert tex == bytes(64)

    def test_invalid_resolution(self):
        with pytest.raises(ValueError):
            generate_texture(_unit_box(), 0, Bounds.empty())


# ===========================================================================
# sample_levelset / save_npy
# ===========================================================================

class TestSampleLevelset:
    def test_shape_and_sign(self):
        sdf = SDFObject([SDFElement(Sphere(1.0))])
        phi = sample_levelset(sdf, sdf.get_bounds(), 8)
        assert phi.shape == (8, 8, 8)
        assert (phi < 0).any()
        assert (phi > 0).any()

    def test_indexing_is_xyz(self):
        sdf = _small_sphere_at([3.5, 0.5, 1.5])
        phi = sample_levelset(sdf, Bounds.of((0, 0, 0), (4, 4, 4)), 4)
        npt.assert_allclose(phi[3, 0, 1], -0.25)

    @pytest.mark.parametrize(
        "bounds",
        [
            Bounds.of((1, 1, 1), (0, 0, 0)),
            Bounds.of((0.5, 0.5, 0.5), (0.5, 0.5, 0.5)),
            Bounds.empty(),
        ],
    )
    def test_bounds_without_extent_rejected(self, bounds):
        sdf = SDFObject([SDFElement(Sphere(1.0))])
        with pytest.raises(ValueError):
            sample_levelset(sdf, bounds, 4)

    def test_partly_inverted_bounds_still_sampled(self):
        sdf = SDFObject([SDFElement(Sphere(1.0))])
        phi = sample_levelset(sdf, Bounds.of((0, 0, 0), (2, -1, 0)), 2)
        assert phi.shape == (2, 2, 2)
        npt.assert_allclose(phi[0, 0, 0], np.sqrt(3.0) * 0.5 - 1.0)


class TestSaveNpy:
    def test_round_trip(self, tmp_path):
        sdf = _unit_box()
        tex = sdf.generate_texture(3, sdf.get_bounds())
        path = tmp_path / "a" / "b" / "tex.npy"
        save_npy(str(path), tex, 3)
        loaded = np.load(path)
        assert loaded.shape == (3, 3, 3)
        assert loaded.dtype == np.uint8
        assert loaded.tobytes() == tex
