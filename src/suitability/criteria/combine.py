"""
Mask Combiner

Fuses binary suitability masks into one "all criteria satisfied" mask.

Conceptually a multiplicative AND over {1, nodata}: nodata is absorbing, so
a cell is suitable only if every input mask marks it suitable.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from ..raster.grid import Grid, check_conformant
from .reclassify import MASK_DTYPE, SUITABLE

logger = logging.getLogger(__name__)


def combine(masks: Sequence[Grid], nodata: Optional[float] = None) -> Grid:
    """
    Combine conformant masks with a cell-wise AND.

    Args:
        masks: Binary {1, nodata} masks on the same cell grid
        nodata: Output sentinel (defaults to the first mask's nodata)

    Returns:
        New mask Grid: 1 where every input is 1, nodata elsewhere

    Raises:
        NonConformantInputs: If `masks` is empty or any mask is not conformant

    Examples:
        >>> combined = combine([sst_mask, depth_mask])
        >>> combined.cells.tolist()
        [[nan, 1.0], [1.0, nan]]
    """
    masks = list(masks)
    check_conformant(masks)

    out_nodata = masks[0].nodata if nodata is None else nodata
    suitable = np.logical_and.reduce([m.cells == SUITABLE for m in masks])
    out = np.where(suitable, SUITABLE, out_nodata).astype(MASK_DTYPE)

    logger.debug(
        f"Combined {len(masks)} masks: {int(np.sum(suitable))} cells satisfy all criteria"
    )
    return masks[0].derive(out, nodata=out_nodata)
