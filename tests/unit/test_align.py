"""
Unit Tests for Grid Alignment

Tests verify:
1. Resampled output is conformant with the reference
2. Nearest-neighbour policy (no interpolated values)
3. Cells outside the source footprint become nodata
4. Cropping to a reference extent
5. CRS and extent failures
"""

import sys
from pathlib import Path

import numpy as np
import pytest
from affine import Affine

# Add src to path
src_path = Path(__file__).parent.parent.parent / 'src'
sys.path.insert(0, str(src_path))

from suitability.exceptions import AlignmentError, CrsMismatch, EmptyIntersection
from suitability.raster.align import align, crop, resample
from suitability.raster.grid import Grid, is_conformant


CRS = "EPSG:5070"


# Fixtures
@pytest.fixture
def coarse():
    """2x2 grid of 20 m cells covering (0, 0) - (40, 40)"""
    return Grid([[1.0, 2.0], [3.0, 4.0]], Affine(20, 0, 0, 0, -20, 40), CRS)


@pytest.fixture
def fine_reference():
    """4x4 grid of 10 m cells covering (0, 0) - (40, 40)"""
    return Grid(np.zeros((4, 4)), Affine(10, 0, 0, 0, -10, 40), CRS)


class TestResample:
    """Test nearest-neighbour resampling."""

    def test_output_conformant_with_reference(self, coarse, fine_reference):
        out = resample(coarse, fine_reference)

        assert out.width == fine_reference.width
        assert out.height == fine_reference.height
        assert out.transform == fine_reference.transform
        assert out.crs_id == fine_reference.crs_id
        assert is_conformant(out, fine_reference)

    def test_upsampling_replicates_values(self, coarse, fine_reference):
        out = resample(coarse, fine_reference)

        expected = [
            [1, 1, 2, 2],
            [1, 1, 2, 2],
            [3, 3, 4, 4],
            [3, 3, 4, 4],
        ]
        np.testing.assert_array_equal(out.cells, expected)

    def test_no_interpolated_values(self, coarse, fine_reference):
        """Every output value already exists in the input."""
        out = resample(coarse, fine_reference)
        assert set(np.unique(out.cells)) <= set(np.unique(coarse.cells))

    def test_identical_grid_is_identity(self, coarse):
        out = resample(coarse, coarse)
        np.testing.assert_array_equal(out.cells, coarse.cells)

    def test_cells_outside_source_are_nodata(self, coarse):
        """Reference extends 20 m east of the source."""
        wide = Grid(np.zeros((4, 6)), Affine(10, 0, 0, 0, -10, 40), CRS)
        out = resample(coarse, wide)

        assert np.isnan(out.cells[:, 4:]).all()
        np.testing.assert_array_equal(out.cells[:2, :4], [[1, 1, 2, 2], [1, 1, 2, 2]])

    def test_keeps_target_nodata(self):
        source = Grid([[-9999.0, 5.0]], Affine(10, 0, 0, 0, -10, 10), CRS, nodata=-9999.0)
        out = resample(source, source)

        assert out.nodata == -9999.0
        assert out.cells.tolist() == [[-9999.0, 5.0]]

    def test_crs_mismatch_raises(self, coarse):
        geographic = Grid(np.zeros((2, 2)), Affine(1, 0, 0, 0, -1, 2), "EPSG:4326")
        with pytest.raises(CrsMismatch):
            resample(coarse, geographic)

    def test_crs_mismatch_message_names_both_grids(self, coarse):
        geographic = Grid(np.zeros((2, 2)), Affine(1, 0, 0, 0, -1, 2), "EPSG:4326")
        with pytest.raises(AlignmentError, match="EPSG:4326"):
            resample(coarse, geographic)

    def test_does_not_mutate_inputs(self, coarse, fine_reference):
        before = coarse.cells.copy()
        resample(coarse, fine_reference)
        np.testing.assert_array_equal(coarse.cells, before)
        assert (fine_reference.cells == 0).all()


class TestCropToReference:
    """Test cropping a grid to a reference extent."""

    def test_crop_to_reference_grid(self):
        big = Grid(np.arange(16, dtype=float).reshape(4, 4), Affine(10, 0, 0, 0, -10, 40), CRS)
        small = Grid(np.zeros((2, 2)), Affine(10, 0, 10, 0, -10, 30), CRS)

        cropped = crop(big, small)
        assert cropped.cells.tolist() == [[5, 6], [9, 10]]
        assert cropped.bounds == small.bounds

    def test_crop_to_extent_tuple(self):
        big = Grid(np.arange(16, dtype=float).reshape(4, 4), Affine(10, 0, 0, 0, -10, 40), CRS)
        cropped = crop(big, (0, 20, 20, 40))
        assert cropped.cells.tolist() == [[0, 1], [4, 5]]

    def test_disjoint_reference_raises_empty_intersection(self, coarse):
        far_away = Grid(np.zeros((2, 2)), Affine(10, 0, 1000, 0, -10, 1000), CRS)
        with pytest.raises(EmptyIntersection):
            crop(coarse, far_away)

    def test_empty_intersection_names_both_grids(self, coarse):
        far_away = Grid(np.zeros((2, 2)), Affine(10, 0, 1000, 0, -10, 1000), CRS)
        with pytest.raises(EmptyIntersection) as exc_info:
            crop(coarse, far_away)

        message = str(exc_info.value)
        assert str(coarse.bounds) in message
        assert str(far_away.bounds) in message
        assert "2x2 grid" in message

    def test_empty_intersection_with_extent_tuple(self, coarse):
        with pytest.raises(EmptyIntersection, match="extent"):
            crop(coarse, (1000, 1000, 1010, 1010))


class TestAlign:
    """Test crop-then-resample alignment."""

    def test_align_larger_target_onto_reference(self):
        """Target extends one cell past the reference on every side."""
        depth = Grid(np.arange(16, dtype=float).reshape(4, 4), Affine(10, 0, -10, 0, -10, 30), CRS)
        sst = Grid(np.zeros((2, 2)), Affine(10, 0, 0, 0, -10, 20), CRS)

        aligned = align(depth, sst)

        assert is_conformant(aligned, sst)
        assert aligned.cells.tolist() == [[5, 6], [9, 10]]

    def test_align_disjoint_grids_raises(self, coarse):
        far_away = Grid(np.zeros((2, 2)), Affine(10, 0, 1000, 0, -10, 1000), CRS)
        with pytest.raises(EmptyIntersection):
            align(coarse, far_away)

    def test_align_crs_mismatch_raises(self, coarse):
        geographic = Grid(np.zeros((2, 2)), Affine(1, 0, 0, 0, -1, 2), "EPSG:4326")
        with pytest.raises(CrsMismatch):
            align(coarse, geographic)


# Run tests
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
