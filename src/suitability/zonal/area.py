"""
Geodesic cell area.

Cell area in km² for every cell of a grid:
- Geographic CRS (lon/lat degrees): exact area of each cell on a sphere of
  the authalic Earth radius, R² · Δλ · |sin φ_top − sin φ_bottom|. Cells
  shrink toward the poles.
- Projected CRS: |det(transform)| converted through the CRS linear unit.
  Exact for equal-area projections; other projections are the caller's
  responsibility.
"""

import logging

import numpy as np

from ..raster.grid import Grid

logger = logging.getLogger(__name__)

# Radius of the sphere with the same surface area as the WGS84 ellipsoid
AUTHALIC_EARTH_RADIUS_KM = 6371.0072


def _geographic_cell_area_km2(grid: Grid) -> np.ndarray:
    t = grid.transform
    dlon = np.deg2rad(abs(t.a))

    edges = t.f + t.e * np.arange(grid.height + 1)
    edges = np.clip(edges, -90.0, 90.0)
    sin_edges = np.sin(np.deg2rad(edges))

    row_area = AUTHALIC_EARTH_RADIUS_KM ** 2 * dlon * np.abs(np.diff(sin_edges))
    return np.repeat(row_area[:, None], grid.width, axis=1)


def _projected_cell_area_km2(grid: Grid) -> np.ndarray:
    _, metres_per_unit = grid.crs.linear_units_factor
    cell_m2 = abs(grid.transform.determinant) * metres_per_unit ** 2
    return np.full(grid.shape, cell_m2 / 1_000_000.0, dtype=np.float64)


def cell_area_km2(grid: Grid) -> np.ndarray:
    """
    Area of every cell in km².

    Args:
        grid: Any grid (only its georeferencing is used)

    Returns:
        Float64 array of shape (height, width)

    Examples:
        >>> g = Grid(np.zeros((1, 1)), Affine(1, 0, 0, 0, -1, 1), "EPSG:4326")
        >>> round(float(cell_area_km2(g)[0, 0]), 1)  # 1° x 1° cell at the equator
        12363.7
    """
    if grid.crs.is_geographic:
        area = _geographic_cell_area_km2(grid)
    else:
        area = _projected_cell_area_km2(grid)

    logger.debug(
        f"Cell areas for {grid.crs_id}: {area.min():.4f} - {area.max():.4f} km²"
    )
    return area
