"""
Suitability Pipeline

Scores zones for a farmed species from sea surface temperature and depth.

Steps:
1. Align the depth grid onto the SST grid (SST is the reference because it
   is the costlier multi-year composite to resample)
2. Reclassify SST and depth against this call's own thresholds
3. Combine the two criterion masks into one suitability mask
4. Rasterize zones against the mask
5. Aggregate suitable area per zone

Design Principles:
- Stateless and re-entrant: every call is a pure function of its inputs
- Both criterion masks are rebuilt on every call, never reused across calls
- Inputs are never mutated
"""

import logging
from typing import List, Mapping, Sequence, Tuple, Union

from .criteria.combine import combine
from .criteria.reclassify import classify_criterion
from .criteria.schemas import SuitabilityCriteria, SuitabilityCriterion
from .raster.align import align
from .raster.grid import Grid
from .species.config import SpeciesProfile, load_species_profile
from .zonal.aggregate import aggregate
from .zonal.rasterize import rasterize_zones
from .zonal.schemas import ZonalResult, Zone

logger = logging.getLogger(__name__)

# Type aliases
CriteriaInput = Union[SuitabilityCriteria, Mapping[str, SuitabilityCriterion]]
PipelineResult = Tuple[Grid, List[ZonalResult]]


def run(
    sst_grid: Grid,
    depth_grid: Grid,
    zones: Sequence[Zone],
    criteria: CriteriaInput
) -> PipelineResult:
    """
    Run the suitability pipeline once.

    Args:
        sst_grid: Sea surface temperature (°C), the alignment reference
        depth_grid: Depth (m), aligned onto the SST grid
        zones: Zones in the grids' CRS
        criteria: {'sst': SuitabilityCriterion, 'depth': SuitabilityCriterion}
            or a SuitabilityCriteria model

    Returns:
        Tuple of (suitability mask, per-zone results in zone order)

    Raises:
        CrsMismatch: If the grids declare different CRSs
        EmptyIntersection: If the grids do not overlap
    """
    criteria = SuitabilityCriteria.from_mapping(criteria)
    label = criteria.species_label or "unlabelled"
    logger.info(
        f"Running suitability pipeline ({label}): "
        f"sst [{criteria.sst.min_threshold}, {criteria.sst.max_threshold}], "
        f"depth [{criteria.depth.min_threshold}, {criteria.depth.max_threshold}], "
        f"{len(zones)} zones"
    )

    aligned_depth = align(depth_grid, sst_grid)

    sst_mask = classify_criterion(sst_grid, criteria.sst)
    depth_mask = classify_criterion(aligned_depth, criteria.depth)

    mask = combine([sst_mask, depth_mask])

    zone_raster = rasterize_zones(zones, like=mask)
    results = aggregate(mask, zone_raster, zones)

    return mask, results


def run_for_species(
    sst_grid: Grid,
    depth_grid: Grid,
    zones: Sequence[Zone],
    species: Union[str, SpeciesProfile]
) -> PipelineResult:
    """
    Run the pipeline with thresholds from a species profile.

    Args:
        species: Profile name under config/species/ (e.g. 'oyster') or a
            loaded SpeciesProfile

    Examples:
        >>> mask, results = run_for_species(sst, depth, zones, 'oyster')
    """
    profile = species if isinstance(species, SpeciesProfile) else load_species_profile(species)
    return run(sst_grid, depth_grid, zones, profile.to_criteria())
