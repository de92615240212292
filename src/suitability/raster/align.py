"""
Grid Aligner

Reconciles two grids of differing resolution, extent or origin so they
become conformant and can be combined cell-by-cell.

Resampling policy is nearest-neighbour: every output cell copies the value
of the input cell whose footprint contains the output cell's center. The
aligned field (typically depth) is ordinal and must not be smoothed into
intermediate values that were never measured.

Design Principles:
- Same CRS only (reprojection is the loader's job)
- Never alters the values of the grid being aligned
- Fail fast with the offending grid pair named in the message
"""

import logging
from typing import Union

import numpy as np
from rasterio.enums import Resampling
from rasterio.warp import reproject

from ..exceptions import CrsMismatch, EmptyIntersection, ExtentMismatch
from .grid import Extent, Grid, crop as crop_to_extent

logger = logging.getLogger(__name__)


def _describe(grid: Grid) -> str:
    return f"{grid.width}x{grid.height} grid in {grid.crs_id} at {grid.bounds}"


def _check_same_crs(target: Grid, reference: Grid) -> None:
    if target.crs != reference.crs:
        raise CrsMismatch(
            f"Cannot align {_describe(target)} onto {_describe(reference)}: "
            f"CRS {target.crs_id!r} differs from {reference.crs_id!r}"
        )


def crop(target: Grid, reference_extent: Union[Grid, Extent]) -> Grid:
    """
    Clip a grid to the bounding extent of a reference.

    Args:
        target: Grid to clip
        reference_extent: Reference Grid (its bounds are used) or an
            (xmin, ymin, xmax, ymax) tuple

    Returns:
        New Grid covering the overlap, snapped outward to whole target cells

    Raises:
        CrsMismatch: If a reference Grid declares a different CRS
        EmptyIntersection: If nothing of the target overlaps the extent
    """
    if isinstance(reference_extent, Grid):
        _check_same_crs(target, reference_extent)
        extent = reference_extent.bounds
        reference = _describe(reference_extent)
    else:
        extent = tuple(reference_extent)
        reference = f"extent {extent}"

    try:
        return crop_to_extent(target, extent)
    except ExtentMismatch as e:
        raise EmptyIntersection(
            f"Cropping {_describe(target)} to {reference} leaves no cells"
        ) from e


def resample(target: Grid, reference: Grid) -> Grid:
    """
    Nearest-neighbour resample a grid onto a reference's cell grid.

    Output cells whose centers fall outside the target's footprint are
    nodata.

    Args:
        target: Grid providing the values
        reference: Grid providing width, height, transform and CRS

    Returns:
        New Grid conformant with `reference`, carrying the target's nodata

    Raises:
        CrsMismatch: If the grids declare different CRSs
    """
    _check_same_crs(target, reference)

    # Warp in float64 (GDAL has no int64 support); integer values survive exactly
    source = np.ascontiguousarray(target.cells, dtype=np.float64)
    destination = np.full(reference.shape, target.nodata, dtype=np.float64)

    reproject(
        source=source,
        destination=destination,
        src_transform=target.transform,
        src_crs=target.crs,
        src_nodata=target.nodata,
        dst_transform=reference.transform,
        dst_crs=reference.crs,
        dst_nodata=target.nodata,
        resampling=Resampling.nearest
    )

    logger.debug(
        f"Resampled {_describe(target)} onto {_describe(reference)} (nearest)"
    )

    return Grid(
        destination.astype(target.cells.dtype),
        transform=reference.transform,
        crs_id=reference.crs_id,
        nodata=target.nodata
    )


def align(target: Grid, reference: Grid) -> Grid:
    """
    Crop then resample `target` so it is conformant with `reference`.

    Raises:
        CrsMismatch: If the grids declare different CRSs
        EmptyIntersection: If the grids do not overlap
    """
    _check_same_crs(target, reference)
    cropped = crop(target, reference)
    aligned = resample(cropped, reference)

    logger.info(
        f"Aligned {target.width}x{target.height} grid onto "
        f"{reference.width}x{reference.height} reference"
    )
    return aligned
