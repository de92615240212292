"""
Multi-year raster composites.

Sea surface temperature arrives as one grid per year, usually in Kelvin.
The suitability pipeline consumes a single mean composite in Celsius.
"""

import logging
from typing import Sequence

import numpy as np

from .grid import Grid, check_conformant

logger = logging.getLogger(__name__)

KELVIN_OFFSET = 273.15


def mean_composite(grids: Sequence[Grid]) -> Grid:
    """
    Cell-wise mean of conformant grids, ignoring nodata.

    A cell is nodata in the composite only if every input is nodata there.

    Args:
        grids: Conformant grids (e.g. one per year)

    Returns:
        Float grid on the first grid's georeferencing, nodata NaN

    Raises:
        NonConformantInputs: On an empty list or mismatched grids
    """
    check_conformant(grids)

    stack = np.stack([np.where(g.valid_mask(), g.cells, np.nan).astype(np.float64) for g in grids])
    counts = np.sum(~np.isnan(stack), axis=0)
    sums = np.nansum(stack, axis=0)
    mean = np.divide(sums, counts, out=np.full(counts.shape, np.nan), where=counts > 0)

    logger.info(
        f"Built mean composite of {len(grids)} grids "
        f"({int(np.sum(counts == 0))} cells with no data in any year)"
    )
    return grids[0].derive(mean, nodata=np.nan)


def kelvin_to_celsius(grid: Grid) -> Grid:
    """Convert a temperature grid from Kelvin to Celsius, keeping nodata."""
    valid = grid.valid_mask()
    celsius = np.where(valid, grid.cells.astype(np.float64) - KELVIN_OFFSET, np.nan)
    return grid.derive(celsius, nodata=np.nan)
