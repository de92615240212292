"""
Marine Aquaculture Suitability Engine

Scores zones for a farmed species from sea surface temperature and depth
grids, producing a suitability mask and per-zone suitable area.

Sub-packages:
- raster: Grid, alignment and composites
- criteria: Threshold reclassification and mask combination
- zonal: Zone rasterization, cell area and aggregation
- species: YAML species profiles
"""

from .pipeline import run, run_for_species

__all__ = [
    'run',
    'run_for_species',
]
