"""
Zonal Aggregator

Sums suitable cell area per zone and joins it against each zone's reference
area to give a percent-of-zone-suitable figure.

Algorithm:
1. Compute geodesic cell area for the mask's grid
2. Keep cells where mask == 1 and a zone label is present
3. Grouped sum of cell area by zone label (numpy.bincount)
4. Join each zone's sum onto its total_area_km2

Error policy:
- A zone with no suitable cells gets 0.0 km² and 0 %, not an error
- A zone without a total area is logged, flagged "missing_total_area" and
  skipped for the percentage only; other zones carry on
- A zone with total area 0 is flagged "zero_total_area" (percentage None)
- A percentage above 100 is kept and flagged "exceeds_total_area"; it means
  the reference area was computed under a different projection
"""

import logging
from typing import Dict, List, Sequence

import numpy as np
import pandas as pd

from ..criteria.reclassify import SUITABLE
from ..exceptions import NonConformantInputs, UnknownZoneField
from ..raster.grid import Grid, is_conformant
from .area import cell_area_km2
from .rasterize import UNZONED, ZoneRaster
from .schemas import ZonalResult, Zone, ZoneId

logger = logging.getLogger(__name__)


def total_suitable_area_km2(mask: Grid) -> float:
    """Total area (km²) of suitable cells, straight from the mask."""
    area = cell_area_km2(mask)
    return float(np.sum(area[mask.cells == SUITABLE]))


def suitable_area_by_zone(mask: Grid, zone_raster: ZoneRaster) -> Dict[ZoneId, float]:
    """
    Grouped sum of suitable cell area keyed by zone id.

    Every zone in the raster appears in the result; zones without suitable
    cells map to 0.0. Cells outside every zone contribute nothing.

    Raises:
        NonConformantInputs: If the mask and zone raster do not share a cell grid
    """
    if not is_conformant(mask, zone_raster.grid):
        raise NonConformantInputs(
            f"Zone raster {zone_raster.grid!r} is not conformant with mask {mask!r}"
        )

    labels = zone_raster.grid.cells
    selected = (mask.cells == SUITABLE) & (labels != UNZONED)
    area = cell_area_km2(mask)

    sums = np.bincount(
        labels[selected].astype(np.int64),
        weights=area[selected],
        minlength=len(zone_raster.labels) + 1
    )
    return {zone_id: float(sums[label]) for label, zone_id in zone_raster.labels.items()}


def _zone_total_area(zone: Zone) -> float:
    if zone.total_area_km2 is None:
        raise UnknownZoneField(zone.id, "total_area_km2")
    return zone.total_area_km2


def _join_zone(zone: Zone, suitable_km2: float) -> ZonalResult:
    """Join one zone's suitable area onto its total area."""
    try:
        total = _zone_total_area(zone)
    except UnknownZoneField as e:
        logger.error(f"Skipping percentage for zone {zone.id!r}: {e}")
        return ZonalResult(
            zone_id=zone.id,
            suitable_area_km2=suitable_km2,
            flag="missing_total_area",
            message=str(e)
        )

    if total == 0:
        logger.warning(f"Zone {zone.id!r} has total_area_km2 == 0; percentage undefined")
        return ZonalResult(
            zone_id=zone.id,
            suitable_area_km2=suitable_km2,
            total_area_km2=total,
            flag="zero_total_area",
            message="total_area_km2 is 0, percent suitable is undefined"
        )

    pct = 100.0 * suitable_km2 / total
    if pct > 100.0:
        logger.warning(
            f"Zone {zone.id!r}: suitable area {suitable_km2:.2f} km² exceeds total area "
            f"{total:.2f} km² ({pct:.1f}%). Check the projection used for total_area_km2."
        )
        return ZonalResult(
            zone_id=zone.id,
            suitable_area_km2=suitable_km2,
            total_area_km2=total,
            pct_suitable=pct,
            flag="exceeds_total_area",
            message=f"pct_suitable {pct:.1f} > 100; total_area_km2 likely from a different projection"
        )

    return ZonalResult(
        zone_id=zone.id,
        suitable_area_km2=suitable_km2,
        total_area_km2=total,
        pct_suitable=pct
    )


def aggregate(mask: Grid, zone_raster: ZoneRaster, zones: Sequence[Zone]) -> List[ZonalResult]:
    """
    Per-zone suitable area and percent suitable.

    Args:
        mask: Binary {1, nodata} suitability mask
        zone_raster: Zones burned onto the mask's cell grid
        zones: The zones that were rasterized (for their total areas)

    Returns:
        One ZonalResult per zone, in input order

    Raises:
        NonConformantInputs: If the mask and zone raster do not share a cell grid
    """
    sums = suitable_area_by_zone(mask, zone_raster)
    results = [_join_zone(zone, sums.get(zone.id, 0.0)) for zone in zones]

    flagged = [r for r in results if r.flag != "ok"]
    logger.info(
        f"Aggregated {len(results)} zones: "
        f"{sum(r.suitable_area_km2 for r in results):.2f} km² suitable, "
        f"{len(flagged)} flagged"
    )
    return results


def results_to_dataframe(results: Sequence[ZonalResult]) -> pd.DataFrame:
    """
    Tabular view of zonal results.

    Returns:
        DataFrame with columns:
        - zone_id: Zone identifier
        - suitable_area_km2: Suitable area (km²)
        - total_area_km2: Reference zone area (km²)
        - pct_suitable: Percent of zone suitable
        - flag: Data-quality flag
        - message: Flag explanation
    """
    columns = ['zone_id', 'suitable_area_km2', 'total_area_km2', 'pct_suitable', 'flag', 'message']
    rows = [r.model_dump() for r in results]
    return pd.DataFrame(rows, columns=columns)
