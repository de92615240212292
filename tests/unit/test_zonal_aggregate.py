"""
Unit Tests for Zonal Aggregation

Tests verify:
1. Suitable area summed per zone from cell areas
2. Percent suitable joined from each zone's total area
3. Zero suitable cells give 0, not an error
4. Missing and zero total areas are flagged, never defaulted
5. Percentages above 100 are flagged, never clamped
6. No double counting against the mask total
"""

import sys
import warnings
from pathlib import Path

import numpy as np
import pytest
from affine import Affine
from shapely.geometry import box

# Add src to path
src_path = Path(__file__).parent.parent.parent / 'src'
sys.path.insert(0, str(src_path))

from suitability.exceptions import NonConformantInputs
from suitability.raster.grid import Grid
from suitability.zonal.aggregate import (
    aggregate,
    results_to_dataframe,
    suitable_area_by_zone,
    total_suitable_area_km2,
)
from suitability.zonal.rasterize import rasterize_zones
from suitability.zonal.schemas import Zone


TRANSFORM = Affine(10000, 0, 0, 0, -10000, 20000)  # 100 km² cells
N = np.nan


def _mask(cells, transform=TRANSFORM):
    return Grid(cells, transform, "EPSG:5070")


def _run(mask, zones):
    return aggregate(mask, rasterize_zones(zones, like=mask), zones)


# Fixtures
@pytest.fixture
def diagonal_mask():
    """Two of four 100 km² cells suitable"""
    return _mask([[N, 1], [1, N]])


@pytest.fixture
def whole_zone():
    return Zone(id="eez", geometry=box(0, 0, 20000, 20000), total_area_km2=400)


class TestAggregate:
    """Test per-zone area and percentage."""

    def test_whole_grid_zone(self, diagonal_mask, whole_zone):
        """Two suitable 100 km² cells in a 400 km² zone."""
        [result] = _run(diagonal_mask, [whole_zone])

        assert result.zone_id == "eez"
        assert result.suitable_area_km2 == pytest.approx(200.0)
        assert result.total_area_km2 == 400
        assert result.pct_suitable == pytest.approx(50.0)
        assert result.flag == "ok"

    def test_two_zones(self):
        mask = _mask([[1, 1], [1, N]])
        zones = [
            Zone(id="west", geometry=box(0, 0, 10000, 20000), total_area_km2=200),
            Zone(id="east", geometry=box(10000, 0, 20000, 20000), total_area_km2=200),
        ]
        west, east = _run(mask, zones)

        assert west.suitable_area_km2 == pytest.approx(200.0)
        assert west.pct_suitable == pytest.approx(100.0)
        assert east.suitable_area_km2 == pytest.approx(100.0)
        assert east.pct_suitable == pytest.approx(50.0)

    def test_zone_without_suitable_cells(self, whole_zone):
        [result] = _run(_mask([[N, N], [N, N]]), [whole_zone])

        assert result.suitable_area_km2 == 0.0
        assert result.pct_suitable == 0.0
        assert result.flag == "ok"

    def test_zone_covering_no_cells(self, diagonal_mask):
        zone = Zone(id="sliver", geometry=box(0, 0, 100, 100), total_area_km2=0.01)
        [result] = _run(diagonal_mask, [zone])

        assert result.suitable_area_km2 == 0.0
        assert result.pct_suitable == 0.0

    def test_results_in_input_order(self, diagonal_mask):
        zones = [
            Zone(id=3, geometry=box(10000, 0, 20000, 20000), total_area_km2=200),
            Zone(id=1, geometry=box(0, 0, 10000, 20000), total_area_km2=200),
        ]
        results = _run(diagonal_mask, zones)
        assert [r.zone_id for r in results] == [3, 1]

    def test_cells_outside_zones_contribute_nothing(self):
        mask = _mask([[1, 1], [1, 1]])
        zone = Zone(id="nw", geometry=box(0, 10000, 10000, 20000), total_area_km2=100)
        [result] = _run(mask, [zone])

        assert result.suitable_area_km2 == pytest.approx(100.0)

    def test_geographic_grid_uses_geodesic_area(self):
        """Same mask at higher latitude yields less suitable area."""
        low = Grid([[1.0]], Affine(1, 0, 0, 0, -1, 1), "EPSG:4326")
        high = Grid([[1.0]], Affine(1, 0, 0, 0, -1, 61), "EPSG:4326")
        zone_low = Zone(id="low", geometry=box(0, 0, 1, 1), total_area_km2=20000)
        zone_high = Zone(id="high", geometry=box(0, 60, 1, 61), total_area_km2=20000)

        [r_low] = _run(low, [zone_low])
        [r_high] = _run(high, [zone_high])

        assert r_low.suitable_area_km2 == pytest.approx(12363.7, abs=0.1)
        assert r_high.suitable_area_km2 < 0.51 * r_low.suitable_area_km2


class TestDataQualityFlags:
    """Test flagged conditions."""

    def test_zero_total_area_flagged(self, diagonal_mask):
        zone = Zone(id="z", geometry=box(0, 0, 20000, 20000), total_area_km2=0)
        [result] = _run(diagonal_mask, [zone])

        assert result.pct_suitable is None
        assert result.flag == "zero_total_area"
        assert result.suitable_area_km2 == pytest.approx(200.0)

    def test_missing_total_area_flagged_and_others_continue(self, diagonal_mask):
        zones = [
            Zone(id="no_area", geometry=box(0, 0, 10000, 20000)),
            Zone(id="with_area", geometry=box(10000, 0, 20000, 20000), total_area_km2=200),
        ]
        missing, present = _run(diagonal_mask, zones)

        assert missing.flag == "missing_total_area"
        assert missing.pct_suitable is None
        assert missing.total_area_km2 is None
        assert "no_area" in missing.message
        assert missing.suitable_area_km2 == pytest.approx(100.0)

        assert present.flag == "ok"
        assert present.pct_suitable == pytest.approx(50.0)

    def test_percentage_over_100_kept_and_flagged(self, diagonal_mask):
        zone = Zone(id="z", geometry=box(0, 0, 20000, 20000), total_area_km2=150)
        [result] = _run(diagonal_mask, [zone])

        assert result.pct_suitable == pytest.approx(200.0 / 150.0 * 100.0)
        assert result.flag == "exceeds_total_area"


class TestTotals:
    """Test consistency with the mask total."""

    def test_total_suitable_area(self, diagonal_mask):
        assert total_suitable_area_km2(diagonal_mask) == pytest.approx(200.0)

    def test_zone_sums_match_mask_total(self):
        """Disjoint zones tiling the grid neither drop nor double-count cells."""
        rng = np.random.default_rng(3)
        cells = np.where(rng.random((6, 8)) > 0.4, 1.0, np.nan)
        transform = Affine(0.5, 0, -125, 0, -0.5, 45)
        mask = Grid(cells, transform, "EPSG:4326")
        zones = [
            Zone(id="a", geometry=box(-125, 42, -123, 45), total_area_km2=1e5),
            Zone(id="b", geometry=box(-123, 42, -121, 45), total_area_km2=1e5),
        ]

        results = _run(mask, zones)

        assert sum(r.suitable_area_km2 for r in results) == pytest.approx(
            total_suitable_area_km2(mask), rel=1e-12
        )

    def test_suitable_area_by_zone_rejects_non_conformant(self, diagonal_mask, whole_zone):
        other = _mask(np.ones((3, 3)))
        zone_raster = rasterize_zones([whole_zone], like=other)
        with pytest.raises(NonConformantInputs):
            suitable_area_by_zone(diagonal_mask, zone_raster)


class TestResultsToDataFrame:
    """Test the tabular view."""

    def test_columns_and_rows(self, diagonal_mask, whole_zone):
        df = results_to_dataframe(_run(diagonal_mask, [whole_zone]))

        assert list(df.columns) == [
            'zone_id', 'suitable_area_km2', 'total_area_km2', 'pct_suitable', 'flag', 'message'
        ]
        assert len(df) == 1
        assert df.loc[0, 'pct_suitable'] == pytest.approx(50.0)

    def test_no_deprecated_model_api(self, diagonal_mask, whole_zone):
        """Building the table must not go through APIs deprecated in pydantic 2."""
        results = _run(diagonal_mask, [whole_zone])

        with warnings.catch_warnings():
            warnings.simplefilter("error")
            df = results_to_dataframe(results)

        assert df.loc[0, 'flag'] == "ok"

    def test_empty_results(self):
        df = results_to_dataframe([])
        assert len(df) == 0
        assert 'zone_id' in df.columns


# Run tests
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
