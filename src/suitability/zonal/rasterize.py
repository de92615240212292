"""
Zone rasterization.

Burns zone polygons onto a grid conformant with the suitability mask. A cell
belongs to the zone whose geometry covers the cell's center. Where zones
overlap, the last zone in input order wins; callers should supply
non-overlapping zones.

Zone ids may be strings, so cells carry integer labels 1..N in input order
(0 = not covered) and the ZoneRaster keeps the label -> zone id lookup.
"""

import logging
from typing import Dict, List, Sequence

import numpy as np
from rasterio.features import rasterize

from ..raster.grid import Grid
from .schemas import Zone, ZoneId

logger = logging.getLogger(__name__)

UNZONED = 0
LABEL_DTYPE = "int32"


class ZoneRaster:
    """
    Zone labels burned onto a cell grid.

    Attributes:
        grid: Label Grid (int32, nodata 0)
        labels: Mapping of label -> zone id
    """

    def __init__(self, grid: Grid, labels: Dict[int, ZoneId]):
        self.grid = grid
        self.labels = dict(labels)

    @property
    def zone_ids(self) -> List[ZoneId]:
        """Zone ids in label (input) order."""
        return [self.labels[label] for label in sorted(self.labels)]

    def zone_id_at(self, row: int, col: int):
        """Zone id covering a cell, or None if the cell is outside every zone."""
        label = int(self.grid.cells[row, col])
        return self.labels.get(label)

    def cell_counts(self) -> Dict[ZoneId, int]:
        """Number of cells burned for each zone."""
        counts = np.bincount(self.grid.cells.ravel(), minlength=len(self.labels) + 1)
        return {zone_id: int(counts[label]) for label, zone_id in self.labels.items()}


def rasterize_zones(zones: Sequence[Zone], like: Grid) -> ZoneRaster:
    """
    Burn zones onto the cell grid of `like`.

    Args:
        zones: Zones in the grid's CRS, ids unique
        like: Grid whose width, height, transform and CRS the output copies

    Returns:
        ZoneRaster whose grid is conformant with `like`

    Raises:
        ValueError: If zone ids repeat
    """
    zones = list(zones)
    seen = set()
    for zone in zones:
        if zone.id in seen:
            raise ValueError(f"Duplicate zone id {zone.id!r}")
        seen.add(zone.id)

    labels = {i: zone.id for i, zone in enumerate(zones, start=1)}

    if zones:
        shapes = [(zone.geometry, label) for label, zone in zip(labels, zones)]
        burned = rasterize(
            shapes=shapes,
            out_shape=like.shape,
            transform=like.transform,
            fill=UNZONED,
            all_touched=False,
            dtype=LABEL_DTYPE,
        )
    else:
        burned = np.full(like.shape, UNZONED, dtype=LABEL_DTYPE)

    zone_raster = ZoneRaster(
        Grid(burned, transform=like.transform, crs_id=like.crs_id, nodata=UNZONED),
        labels
    )

    for zone_id, count in zone_raster.cell_counts().items():
        if count == 0:
            logger.warning(f"Zone {zone_id!r} covers no cell centers on the {like.width}x{like.height} grid")

    logger.info(
        f"Rasterized {len(zones)} zones: "
        f"{int(np.sum(burned != UNZONED))} of {burned.size} cells zoned"
    )
    return zone_raster
